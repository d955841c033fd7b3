"""Route blueprints for the Radio Now Playing web app"""
