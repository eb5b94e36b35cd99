# Servir con: gunicorn -c gunicorn.conf.py "token_authority:create_app()"
import os

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = 1
# Plazo total de cada petición; las consultas SQL lo respetan via DB_STATEMENT_TIMEOUT_MS
timeout = int(os.getenv("GUNICORN_TIMEOUT", "30"))
graceful_timeout = 30
keepalive = 5

# Logs a stdout/stderr (colectables por Docker)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Respeto de cabeceras de proxy
forwarded_allow_ips = "*"
proxy_protocol = False

wsgi_app = "token_authority:create_app()"
