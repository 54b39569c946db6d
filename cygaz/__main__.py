"""python -m cygaz → serve the API on HOST:PORT."""

import uvicorn

from cygaz.core.config import HOST, LOG_LEVEL, PORT


def main() -> None:
    uvicorn.run("cygaz.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
