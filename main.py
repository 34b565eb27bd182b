import logging

from aiohttp import web

from core import config
from api.app import create_app

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("newsportal")


def main() -> None:
    config.validate_required_env()
    log.info("NewsPortal proxy listening on %s:%s", config.HOST, config.PORT)
    web.run_app(create_app(), host=config.HOST, port=config.PORT, print=None)


if __name__ == "__main__":
    main()
