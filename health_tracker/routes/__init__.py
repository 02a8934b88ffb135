"""HTTP blueprints for the Health Tracker API."""
