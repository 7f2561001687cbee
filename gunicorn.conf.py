"""
Production Server Configuration

Run FastAPI with Uvicorn workers under Gunicorn for production deployment.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:5000")
backlog = 2048

# Worker processes; each holds its own pool and summary cache
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
max_requests = 10000
max_requests_jitter = 1000
# Above the 60s report query timeout so slow reports answer with an envelope
timeout = 90
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "pos-reporting-api"

# Server mechanics
daemon = False
pidfile = "/tmp/gunicorn.pid"
user = None
group = None
tmp_upload_dir = None

# Logging
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = "-"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'


def when_ready(server):
    """Called when server is ready to receive connections."""
    server.log.info("POS reporting API ready on %s", bind)


def worker_abort(worker):
    """Called when worker receives SIGABRT signal, usually a timeout."""
    worker.log.warning("Worker %s aborted after %ss", worker.pid, timeout)
