import logging

from pagehost.core.db import engine, init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# 中文：创建 site 和 site_file 表
def main() -> None:
    logger.info("Creating tables")
    init_db(engine)
    logger.info("Tables created")


if __name__ == "__main__":
    main()
