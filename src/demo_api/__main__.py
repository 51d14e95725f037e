"""Entry point for the leaky bootloader demo API."""

import uvicorn


def main():
    """Start the demo API server."""
    uvicorn.run("demo_api.api:app", host="127.0.0.1", port=8000, reload=False)


if __name__ == "__main__":
    main()
