# src/hubspot_oauth_quickstart/__main__.py

import uvicorn

from .config import settings


def run():
    uvicorn.run("hubspot_oauth_quickstart.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
