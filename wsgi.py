# wsgi.py (at repo root)
from health_tracker import create_app

app = create_app()
