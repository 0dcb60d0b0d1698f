#!/usr/bin/env python3
"""Main entry point for the Point-Cloud Annotator."""

import argparse
import logging
import sys
import time
from pathlib import Path

from .config import STORE_BACKENDS, Settings
from .utils.fastapi_utils import find_available_port, run_server


def _serve(args: argparse.Namespace, settings: Settings) -> None:
    from .app import create_app

    settings = settings.with_overrides(
        host=args.host,
        port=args.port,
        store=args.store,
        data_dir=Path(args.data_dir) if args.data_dir else None,
    )
    app = create_app(settings)
    port = find_available_port(settings.port)

    run_server(
        app,
        host=settings.host,
        port=port,
        features=[
            f"Store backend: {settings.store}",
            "POST /annotations, GET /annotations, DELETE /annotations/{id}",
        ],
        log_level=settings.log_level.lower(),
    )


def _view(args: argparse.Namespace, settings: Settings) -> None:
    import viser

    from .client.api import AnnotationClient
    from .core.cloud_loader import CloudLoader
    from .ui.controller import AnnotationController
    from .ui.notifications import NotificationManager
    from .ui.panel import AnnotationPanel
    from .ui.viser_viewer import ViserViewerAdapter

    settings = settings.with_overrides(api_url=args.api_url)

    loader = CloudLoader(voxel_size=args.voxel_size, center=args.center)
    cloud = loader.load_file(Path(args.cloud))
    points, colors = loader.to_arrays(cloud)
    info = loader.get_cloud_info(cloud)

    port = find_available_port(args.port)
    server = viser.ViserServer(host=args.host, port=port)
    viewer = ViserViewerAdapter(
        server, points, colors, point_size=args.point_size, pick_radius=args.pick_radius
    )
    viewer.show_cloud()

    controller = AnnotationController(
        client=AnnotationClient(settings.api_url),
        viewer=viewer,
        notifier=NotificationManager(server),
        confirm=lambda _message: False,  # replaced by the panel's modal
    )
    AnnotationPanel(server, controller)
    controller.load()

    print("Starting Point-Cloud Annotator viewer...")
    print(f"Open your browser to: http://localhost:{port}")
    print(f"   Cloud: {args.cloud} ({info['points']} points)")
    print(f"   API:   {settings.api_url}")
    print("Controls:")
    print("   Click a point: start an annotation")
    print("   Mouse wheel: zoom")
    print("   Left-click + drag: rotate")

    while True:
        time.sleep(10.0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pointcloud-annotator",
        description="Annotate point clouds with text notes",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the annotation API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--store", choices=STORE_BACKENDS, default=None)
    serve.add_argument("--data-dir", default=None, help="Directory of the JSON store")

    view = sub.add_parser("view", help="Open a point cloud in the browser viewer")
    view.add_argument("cloud", help="Point cloud file (.ply, .pcd, .xyz, ...)")
    view.add_argument("--api-url", default=None, help="Base URL of the annotation API")
    view.add_argument("--host", default="0.0.0.0")
    view.add_argument("--port", type=int, default=8080)
    view.add_argument("--voxel-size", type=float, default=None)
    view.add_argument("--center", action="store_true", help="Center the cloud at the origin")
    view.add_argument("--point-size", type=float, default=0.01)
    view.add_argument("--pick-radius", type=float, default=None)
    return parser


def main(argv=None) -> None:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if args.command == "serve":
            _serve(args, settings)
        else:
            _view(args, settings)
    except KeyboardInterrupt:
        print("Shutting down.")
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
