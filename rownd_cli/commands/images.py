"""``rownd upload-image``: push a processed logo to the selected app."""

from __future__ import annotations

import argparse
import posixpath
import secrets
from urllib.parse import urlparse

from rownd_cli.context import CommandContext
from rownd_cli.exceptions import InvalidConfigError, RequestFailedError, UploadError
from rownd_cli.utils.logger import get_logger

logger = get_logger(__name__)

LOGO_TYPES = ("light", "dark", "email")
_KEPT_EXTENSIONS = (".png", ".svg")


def logo_filename(image_url: str) -> str:
    """``logo-<8 hex><ext>``; only .png and .svg are kept, all else becomes .png."""
    ext = posixpath.splitext(urlparse(image_url).path)[1].lower()
    if ext not in _KEPT_EXTENSIONS:
        ext = ".png"
    return f"logo-{secrets.token_hex(4)}{ext}"


def content_type_for(filename: str) -> str:
    return "image/svg+xml" if filename.endswith(".svg") else "image/png"


def upload_image(ctx: CommandContext, image_url: str, logo_type: str) -> str:
    """Process ``image_url`` and upload it as the ``logo_type`` logo.

    Returns the generated filename.
    """
    if logo_type not in LOGO_TYPES:
        raise InvalidConfigError(
            f"Invalid logo type '{logo_type}'. Expected one of: {', '.join(LOGO_TYPES)}"
        )
    app_id = ctx.require_app()

    filename = logo_filename(image_url)
    ctx.out("Processing image...")
    image = ctx.analyzer.process_image(image_url, filename)

    try:
        ctx.api.put(
            f"applications/{app_id}/logo/{logo_type}",
            data=image,
            headers={
                "Content-Type": content_type_for(filename),
                "x-rownd-filename": filename,
            },
            action="upload image",
        )
    except RequestFailedError as exc:
        raise UploadError(exc.message) from exc

    logger.info(
        "Logo uploaded",
        event="rownd.image.uploaded",
        app_id=app_id,
        logo_type=logo_type,
        logo_filename=filename,
        size=len(image),
    )
    ctx.out(f"Successfully uploaded {logo_type} logo")
    return filename


def cmd_upload_image(ctx: CommandContext, args: argparse.Namespace) -> int:
    upload_image(ctx, args.image_url, args.type)
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("upload-image", help="Upload a logo image for the selected app")
    p.add_argument("image_url")
    p.add_argument("type", choices=LOGO_TYPES)
    p.set_defaults(func=cmd_upload_image)
