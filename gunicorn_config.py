"""Gunicorn configuration for Shoebox

Run with: gunicorn -c gunicorn_config.py web:app
"""
import os
import multiprocessing

LOG_DIR = os.getenv('SHOEBOX_LOG_DIR', '/app/logs')

# Server socket
bind = os.getenv('SHOEBOX_BIND', '0.0.0.0:5000')
backlog = 2048

# Worker processes (share requests are short and synchronous)
workers = int(os.getenv('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'
max_requests = 1000
max_requests_jitter = 50
timeout = 60  # mail delivery for named-recipient shares happens inline
keepalive = 2

# Logging
accesslog = os.path.join(LOG_DIR, 'gunicorn_access.log')
errorlog = os.path.join(LOG_DIR, 'gunicorn_error.log')
loglevel = 'info'
# Share tokens live in the URL path, keep the request line out of the access log
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(m)s" %(s)s %(b)s "%(a)s" %(D)s'

# Process naming
proc_name = 'shoebox'

# Development vs Production
reload = os.getenv('FLASK_ENV') == 'development'

def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting Shoebox server")

def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Shoebox server is ready. Listening on: %s", server.cfg.bind)

def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal."""
    worker.log.info("Worker received SIGABRT signal")
