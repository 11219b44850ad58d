# gunicorn.conf.py
# Run with: gunicorn -c gunicorn.conf.py recipetrio.app:app
import multiprocessing as mp
import os

# Bind to address and port
bind = os.getenv("BIND", "0.0.0.0:8076")

# Worker class - the app is ASGI and serves websockets
worker_class = "uvicorn.workers.UvicornWorker"

# Each worker owns its own write queue and streaming sessions
workers = int(os.getenv("WEB_CONCURRENCY", min(mp.cpu_count(), 4)))

# Generations can take minutes; keep above PERSONA_DEADLINE_SECONDS
timeout = int(os.getenv("TIMEOUT", "240"))
graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("KEEPALIVE", "5"))

# Load in each worker so the asyncio objects bind to the worker's loop
preload_app = False

# Whitelisted IPs for X-Forwarded-For header
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1")

# Logs
accesslog = "-" if os.getenv("ACCESS_LOG", "1") == "1" else None
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
capture_output = True
