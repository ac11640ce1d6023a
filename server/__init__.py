from server.app import create_app
