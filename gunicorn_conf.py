import os


def env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_str(name: str, default: str) -> str:
    value = os.environ.get(name)
    return value if value is not None and value.strip() != "" else default


bind = f"0.0.0.0:{env_int('PORT', 5051)}"

# Issuance and admin traffic is low volume. Card records are one row each, so
# several workers can write without losing updates; keep the count small so
# SQLite write locks stay short.
workers = env_int("GUNICORN_WORKERS", 2)

# Threaded workers: one request waits on IPFS and the RPC node for seconds
worker_class = env_str("GUNICORN_WORKER_CLASS", "gthread")
threads = env_int("GUNICORN_THREADS", 4)

keepalive = env_int("GUNICORN_KEEPALIVE", 5)

# Rendering plus IPFS upload plus minting can take a while
timeout = env_int("GUNICORN_TIMEOUT", 120)
graceful_timeout = env_int("GUNICORN_GRACEFUL_TIMEOUT", 30)

# Log to stdout/stderr for container visibility
accesslog = "-"
errorlog = "-"
loglevel = env_str("GUNICORN_LOGLEVEL", "info")

# Photo uploads are multipart; Flask enforces MAX_CONTENT_LENGTH on the body
limit_request_line = 8190
limit_request_fields = 100
limit_request_field_size = 8190
