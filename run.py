#!/usr/bin/env python3
"""Run script for taskmatrix."""

import logging

import uvicorn

from taskmatrix.config import LOG_LEVEL

if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "taskmatrix.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
