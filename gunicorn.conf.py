# gunicorn.conf.py
# Run with: gunicorn -c gunicorn.conf.py "app:create_app()"
import os
import logging
import sys
import multiprocessing

# Configure logging to stdout
accesslog = '-'
errorlog = '-'
loglevel = 'info'

# Get PORT from environment or use default
port = os.getenv('PORT', '8081')
bind = f"0.0.0.0:{port}"

# Load every Bible version once in the master, then fork; workers share the
# read-only cache
preload_app = True

cores = multiprocessing.cpu_count()
workers = min(cores * 2 + 1, 6)  # Use standard formula but cap at 6 workers
threads = 4  # Readers need no locking, so threads can serve requests in parallel

# Log configuration on startup
def on_starting(server):
    logger = logging.getLogger('gunicorn.error')
    logger.setLevel(logging.INFO)
    logger.addHandler(logging.StreamHandler(sys.stdout))
    logger.info(f"Starting gunicorn with {workers} workers on port {port}")
    logger.info(f"Worker timeout set to {timeout} seconds")

# Exports of a full version can take a while
timeout = 120
keepalive = 5
worker_class = "gthread"

# Process naming
proc_name = "bible_versions_api"
default_proc_name = "bible_versions_api"

# Graceful server restart
graceful_timeout = 30  # Give workers 30 seconds to finish serving requests
