"""Run the survey console web server: python -m survey_console"""

import uvicorn

from .config import config


def main():
    uvicorn.run(
        "survey_console.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=config.web.reload,
        log_level=config.web.log_level
    )


if __name__ == "__main__":
    main()
