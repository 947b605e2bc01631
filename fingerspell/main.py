import logging

import uvicorn
from dotenv import load_dotenv

from fingerspell.config import Settings


def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = Settings.from_env()
    uvicorn.run("fingerspell.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("Exit")
