# Uso: gunicorn -c gunicorn_config.py "wsgi:app"

# Gunicorn config variables
workers = 2
bind = "0.0.0.0:8000"
keepalive = 120
errorlog = "-"
accesslog = "-"
loglevel = "info"
worker_class = "gthread"
threads = 4
timeout = 60

# Environment variables
raw_env = [
    "FLASK_ENV=production",
    "PYTHONUNBUFFERED=true",
]
