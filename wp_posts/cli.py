from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from .config import load_config, resolve_runtime_secrets
from .errors import ConfigError, GatewayError, MappingError, NotFoundError
from .gateway import RemoteGateway
from .offline import InMemoryGateway
from .post import Post
from .repository import PostRepository
from .retry import RetryConfig
from .run_log import RunLogger
from .xmlrpc_gateway import XmlRpcGateway


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", required=True, help="Path to YAML config file.")
    parser.add_argument("--log", default=None, help="Append JSONL events to this file.")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use a built-in sample site instead of the configured WordPress.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wp_posts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    latest = subparsers.add_parser("latest", help="Print the most recent published posts.")
    _add_common(latest)
    latest.add_argument("--count", type=int, default=10)
    latest.add_argument("--offset", type=int, default=0)
    latest.set_defaults(_handler=_cmd_latest)

    find = subparsers.add_parser("find", help="Print one post by id.")
    _add_common(find)
    find.add_argument("post_id")
    find.set_defaults(_handler=_cmd_find)

    scan = subparsers.add_parser("scan", help="Visit every published post in id order.")
    _add_common(scan)
    scan.add_argument("--batch-size", type=int, default=None)
    scan.set_defaults(_handler=_cmd_scan)

    touch = subparsers.add_parser("touch", help="Send an empty update to refresh a post.")
    _add_common(touch)
    touch.add_argument("post_id")
    touch.set_defaults(_handler=_cmd_touch)

    featured = subparsers.add_parser("set-featured-image", help="Point a post's thumbnail at a media id.")
    _add_common(featured)
    featured.add_argument("post_id")
    featured.add_argument("media_id")
    featured.set_defaults(_handler=_cmd_set_featured_image)

    upload = subparsers.add_parser("upload-feature-image", help="Upload a file and make it the featured image.")
    _add_common(upload)
    upload.add_argument("post_id")
    upload.add_argument("file")
    upload.set_defaults(_handler=_cmd_upload_feature_image)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _print_post(post: Post) -> None:
    payload = post.attributes()
    payload["categories"] = [c.name for c in post.categories]
    payload["custom_fields"] = [dict(f) for f in post.custom_fields]
    print(json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True, default=_json_default))


def _build_gateway(args: argparse.Namespace, logger: RunLogger | None) -> tuple[RemoteGateway, int]:
    cfg = load_config(args.config)
    if args.offline:
        return InMemoryGateway.seeded(), cfg.repository.batch_size

    secrets = resolve_runtime_secrets(cfg)
    gateway = XmlRpcGateway(
        cfg.wordpress.xmlrpc_url,
        secrets.username,
        secrets.password,
        blog_id=cfg.wordpress.blog_id,
        timeout_seconds=cfg.wordpress.timeout_seconds,
        retry=RetryConfig.from_settings(cfg.retry),
        logger=logger,
    )
    return gateway, cfg.repository.batch_size


def _repository(args: argparse.Namespace, logger: RunLogger | None) -> PostRepository:
    gateway, batch_size = _build_gateway(args, logger)
    return PostRepository(gateway, logger=logger, batch_size=batch_size)


def _cmd_latest(args: argparse.Namespace, logger: RunLogger | None) -> int:
    for post in _repository(args, logger).latest(args.count, args.offset):
        _print_post(post)
    return 0


def _cmd_find(args: argparse.Namespace, logger: RunLogger | None) -> int:
    _print_post(_repository(args, logger).find(args.post_id))
    return 0


def _cmd_scan(args: argparse.Namespace, logger: RunLogger | None) -> int:
    def _visit(post: Post) -> None:
        print(f"post_id={post.identifier} published_at={post.published_at.isoformat()} title={post.title}")

    visited = _repository(args, logger).all(_visit, args.batch_size)
    print(f"visited={visited}")
    return 0


def _cmd_touch(args: argparse.Namespace, logger: RunLogger | None) -> int:
    _repository(args, logger).touch(args.post_id)
    print(f"touched={args.post_id}")
    return 0


def _cmd_set_featured_image(args: argparse.Namespace, logger: RunLogger | None) -> int:
    _repository(args, logger).set_featured_image(args.post_id, args.media_id)
    print(f"featured_image={args.media_id}")
    return 0


def _cmd_upload_feature_image(args: argparse.Namespace, logger: RunLogger | None) -> int:
    path = Path(args.file)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ConfigError(f"Cannot read image file: {path}") from e

    upload = _repository(args, logger).upload_feature_image(args.post_id, path.name, data)
    print(f"media_id={upload.media_id}")
    return 0


def _run(args: argparse.Namespace, logger: RunLogger | None) -> int:
    if logger is not None:
        logger.info("command_started", command=args.command, config_path=str(args.config))
    try:
        return int(args._handler(args, logger))
    except Exception as e:
        if logger is not None:
            logger.exception("command_failed", exc=e, command=args.command)
        raise


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        if args.log:
            with RunLogger.open(args.log) as logger:
                return _run(args, logger)
        return _run(args, None)
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except NotFoundError as e:
        _eprint(str(e))
        return 4
    except (GatewayError, MappingError) as e:
        _eprint(str(e))
        return 3
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
