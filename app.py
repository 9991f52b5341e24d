# Run locally with: pip install -e . && python app.py
from __future__ import annotations

import logging

from site_editor.app import create_app
from site_editor.log import configure_logging
from site_editor.settings import EditorSettings

settings = EditorSettings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)

logger = logging.getLogger("site_editor")


if __name__ == "__main__":
    logger.info("Pages: %s", settings.pages_dir)
    logger.info("Data:  %s", settings.data_dir)
    logger.info("API:   http://localhost:%d/api/pages", settings.port)
    app.run(debug=False, port=settings.port)
