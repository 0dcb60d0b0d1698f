"""
FastAPI utility functions.

Provides the common setup pieces of the annotation API: application
construction, CORS configuration, port discovery and server startup.
"""

import socket
from typing import Optional, Sequence

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

CORS_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type"]


def create_app(
    title: str,
    description: str,
    version: str = "1.0.0",
) -> FastAPI:
    """
    Create a FastAPI application with standard configuration.

    Args:
        title: Application title
        description: Application description
        version: Application version (default: "1.0.0")

    Returns:
        Configured FastAPI application instance
    """
    return FastAPI(
        title=title,
        description=description,
        version=version,
    )


def add_cors_middleware(
    app: FastAPI,
    methods: Sequence[str] = CORS_METHODS,
    headers: Sequence[str] = CORS_HEADERS,
) -> None:
    """
    Add CORS middleware open to any origin.

    Args:
        app: FastAPI application instance
        methods: Allowed HTTP methods
        headers: Allowed request headers
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=list(methods),
        allow_headers=list(headers),
    )


def find_available_port(start_port: int = 8000, max_attempts: int = 100) -> int:
    """
    Find an available port starting from the specified port.

    Args:
        start_port: Port number to start searching from
        max_attempts: Maximum number of ports to try

    Returns:
        Available port number

    Raises:
        RuntimeError: If no available port is found within max_attempts
    """
    for port in range(start_port, start_port + max_attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            result = sock.connect_ex(("localhost", port))
            if result != 0:
                return port
    raise RuntimeError(
        f"Could not find available port in range {start_port}-{start_port + max_attempts}"
    )


def run_server(
    app: FastAPI,
    host: str = "0.0.0.0",
    port: int = 8000,
    app_name: Optional[str] = None,
    features: Optional[list[str]] = None,
    log_level: str = "info",
) -> None:
    """
    Run the FastAPI application with uvicorn.

    Prints startup information including URL and features.

    Args:
        app: FastAPI application instance
        host: Host address to bind to
        port: Port number to listen on
        app_name: Optional application name for display
        features: Optional list of feature descriptions to display
        log_level: uvicorn log level
    """
    display_name = app_name or app.title

    print(f"Starting {display_name}...")
    print(f"API available at: http://localhost:{port}/annotations")

    if features:
        print("Features:")
        for feature in features:
            print(f"   {feature}")

    uvicorn.run(app, host=host, port=port, log_level=log_level)
