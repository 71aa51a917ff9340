import logging

import uvicorn

from storefront.config import settings
from storefront.db.sqlite import init_db
from storefront.web.main import create_app


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    init_db()

    app = create_app()
    uvicorn.run(app, host=settings.web_host, port=settings.web_port, log_config=None)


if __name__ == "__main__":
    main()
