# backend/gunicorn_conf.py

# Gunicorn config for production: `gunicorn -c gunicorn_conf.py`

import os

from brandflow.config.settings import settings

wsgi_app = "brandflow.main:app"
bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"
workers = settings.workers
worker_class = "uvicorn.workers.UvicornWorker"

# Model calls can take most of a minute; leave headroom over ai_timeout_seconds.
timeout = settings.ai_timeout_seconds + 30
graceful_timeout = 30

# Behind a reverse proxy
forwarded_allow_ips = "*"

# --- Logging ---
# structlog writes JSON to stdout; gunicorn's own logs go to the same streams.
accesslog = "-"
errorlog = "-"
loglevel = "info"
