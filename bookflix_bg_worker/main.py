from __future__ import annotations

from bookflix_bg_worker.celery_app import celery_app
from bookflix_bg_worker import membership_worker  # noqa: F401  imported to register tasks


def main() -> None:
    # Celery has no usable prefork pool on Windows, so run solo with embedded beat.
    argv = ["worker", "--loglevel=info", "-P", "solo", "-B"]
    celery_app.worker_main(argv)


if __name__ == "__main__":
    main()
