from __future__ import annotations

import uvicorn

from app.core.app_factory import create_app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )


__all__ = ["app"]
