import uvicorn

from . import config


def main():
    uvicorn.run("chatdemo.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL)


if __name__ == "__main__":
    main()
