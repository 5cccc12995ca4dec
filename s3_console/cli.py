from __future__ import annotations
"""Command-line front end for the S3 console.

Usage:
    python -m s3_console [connection options] buckets
    python -m s3_console ls BUCKET [PREFIX]
    python -m s3_console stat BUCKET KEY
    python -m s3_console get BUCKET KEY DEST
    python -m s3_console put BUCKET PREFIX FILE
    python -m s3_console rm BUCKET KEY
    python -m s3_console mb BUCKET
    python -m s3_console rb BUCKET
    python -m s3_console profile add NAME --endpoint HOST --access-key KEY --secret-key SECRET [--ssl]
    python -m s3_console profile ls | profile rm NAME
    python -m s3_console config show | config set [--max-objects N] [--page-size N] [--region NAME]

Connection options fall back to MINIO_ENDPOINT, MINIO_KEY_ID,
MINIO_ACCESS_KEY and MINIO_SSL; `--profile NAME` uses a saved profile
instead. Exit codes: 0 success, 1 store or input
error, 2 usage error, 130 cancelled.
"""

import argparse
from dataclasses import replace
import logging
import sys
import threading
from typing import Callable, Sequence, TextIO, TypeVar

from .cancellation import CancellationToken
from .controller import ConsoleController
from .errors import Cancelled, ConsoleError, InvalidArgument
from .profiles import ConnectionProfile, profile_from_env
from .settings import AppSettings, SettingsStorage, apply_env_overrides
from .ui_utils import load_package_info, render_buckets, render_listing, render_object_details

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130

T = TypeVar("T")


def build_parser() -> argparse.ArgumentParser:
    info = load_package_info()
    parser = argparse.ArgumentParser(prog="s3_console", description=info.summary)
    parser.add_argument("--version", action="version", version=f"{info.name} {info.version}".strip())
    parser.add_argument("--profile", help="saved connection profile to use")
    parser.add_argument("--endpoint", help="store endpoint, e.g. localhost:9000")
    parser.add_argument("--access-key", help="access key ID")
    parser.add_argument("--secret-key", help="secret access key")
    parser.add_argument("--ssl", action="store_true", default=None, help="connect with HTTPS")
    parser.add_argument("--max-objects", type=int, help="maximum entries shown per listing")
    parser.add_argument("--timeout", type=float, help="seconds before a listing or download is abandoned")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("buckets", help="list buckets")

    ls_cmd = commands.add_parser("ls", help="list a prefix as directories and files")
    ls_cmd.add_argument("bucket")
    ls_cmd.add_argument("prefix", nargs="?", default="/")

    stat_cmd = commands.add_parser("stat", help="show object metadata")
    stat_cmd.add_argument("bucket")
    stat_cmd.add_argument("key")

    get_cmd = commands.add_parser("get", help="download an object ('-' writes to stdout)")
    get_cmd.add_argument("bucket")
    get_cmd.add_argument("key")
    get_cmd.add_argument("destination")

    put_cmd = commands.add_parser("put", help="upload a local file into a prefix")
    put_cmd.add_argument("bucket")
    put_cmd.add_argument("prefix")
    put_cmd.add_argument("source")

    rm_cmd = commands.add_parser("rm", help="delete an object")
    rm_cmd.add_argument("bucket")
    rm_cmd.add_argument("key")

    mb_cmd = commands.add_parser("mb", help="create a bucket")
    mb_cmd.add_argument("bucket")

    rb_cmd = commands.add_parser("rb", help="delete an empty bucket")
    rb_cmd.add_argument("bucket")

    profile_cmd = commands.add_parser("profile", help="manage saved connection profiles")
    profile_actions = profile_cmd.add_subparsers(dest="profile_command", required=True)
    profile_add = profile_actions.add_parser("add", help="save or replace a profile")
    profile_add.add_argument("name")
    profile_add.add_argument("--endpoint", dest="profile_endpoint", required=True)
    profile_add.add_argument("--access-key", dest="profile_access_key", required=True)
    profile_add.add_argument("--secret-key", dest="profile_secret_key", required=True)
    profile_add.add_argument("--ssl", dest="profile_ssl", action="store_true")
    profile_actions.add_parser("ls", help="list saved profiles")
    profile_rm = profile_actions.add_parser("rm", help="delete a saved profile")
    profile_rm.add_argument("name")

    config_cmd = commands.add_parser("config", help="show or change saved settings")
    config_actions = config_cmd.add_subparsers(dest="config_command", required=True)
    config_actions.add_parser("show", help="print the effective settings")
    config_set = config_actions.add_parser("set", help="save new default settings")
    config_set.add_argument("--max-objects", dest="set_max_objects", type=int)
    config_set.add_argument("--page-size", dest="set_page_size", type=int)
    config_set.add_argument("--region", dest="set_region")
    return parser


def resolve_settings(args: argparse.Namespace, storage: SettingsStorage | None = None) -> AppSettings:
    settings = apply_env_overrides((storage or SettingsStorage()).load())
    if args.max_objects is not None:
        if args.max_objects <= 0:
            raise ConsoleError("--max-objects must be greater than zero")
        settings = replace(settings, max_objects=args.max_objects)
    return settings


def resolve_profile(args: argparse.Namespace) -> ConnectionProfile:
    profile = profile_from_env()
    overrides: dict[str, object] = {}
    if args.endpoint:
        overrides["endpoint_url"] = args.endpoint
    if args.access_key:
        overrides["access_key"] = args.access_key
    if args.secret_key:
        overrides["secret_key"] = args.secret_key
    if args.ssl is not None:
        overrides["use_ssl"] = args.ssl
    return replace(profile, **overrides) if overrides else profile


def run_cancellable(task: Callable[[CancellationToken], T], *, timeout: float | None = None) -> T:
    """Run ``task`` in a worker thread and cancel its token on Ctrl-C."""

    token = CancellationToken(timeout=timeout)
    outcome: dict[str, object] = {}

    def worker() -> None:
        try:
            outcome["value"] = task(token)
        except Exception as exc:
            outcome["error"] = exc

    thread = threading.Thread(target=worker, daemon=True)
    thread.start()
    interrupted = False
    try:
        while thread.is_alive():
            thread.join(0.1)
    except KeyboardInterrupt:
        interrupted = True
        token.cancel()
        thread.join()
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    if interrupted:
        raise Cancelled("Interrupted")
    return outcome["value"]  # type: ignore[return-value]


def _write_object(controller: ConsoleController, args: argparse.Namespace, out: TextIO) -> None:
    def download(token: CancellationToken) -> int:
        written = 0
        chunk_size = controller.settings.chunk_size
        with controller.open_object(bucket_name=args.bucket, key=args.key) as stream:
            if args.destination == "-":
                for chunk in stream.iter_chunks(chunk_size, token):
                    out.buffer.write(chunk)
                    written += len(chunk)
                out.flush()
                return written
            with open(args.destination, "wb") as target:
                for chunk in stream.iter_chunks(chunk_size, token):
                    target.write(chunk)
                    written += len(chunk)
        return written

    written = run_cancellable(download, timeout=args.timeout)
    LOGGER.debug("Downloaded %d byte(s) from '%s'", written, args.key)


def manage_profiles(controller: ConsoleController, args: argparse.Namespace, out: TextIO) -> None:
    action = args.profile_command
    if action == "add":
        profile = ConnectionProfile(
            name=args.name,
            endpoint_url=args.profile_endpoint,
            access_key=args.profile_access_key,
            secret_key=args.profile_secret_key,
            use_ssl=args.profile_ssl,
        )
        controller.save_profile(profile)
        lines = [f"saved profile {profile.name}"]
    elif action == "ls":
        lines = [
            f"{profile.name}  {profile.resolved_endpoint}  {profile.access_key}"
            for profile in controller.list_profiles()
        ]
    else:
        controller.delete_profile(args.name)
        lines = [f"removed profile {args.name}"]
    for line in lines:
        print(line, file=out)


def manage_settings(controller: ConsoleController, args: argparse.Namespace, out: TextIO) -> None:
    if args.config_command == "set":
        updates: dict[str, object] = {}
        for field_name, value in (("max_objects", args.set_max_objects), ("page_size", args.set_page_size)):
            if value is None:
                continue
            if value <= 0:
                raise InvalidArgument(f"{field_name} must be greater than zero", operation="config")
            updates[field_name] = value
        if args.set_region is not None:
            updates["region"] = args.set_region.strip()
        if not updates:
            raise InvalidArgument("Nothing to change; pass --max-objects, --page-size or --region", operation="config")
        controller.save_settings(replace(controller.settings_storage.load(), **updates))
    settings = controller.settings
    print(f"max_objects: {settings.max_objects}", file=out)
    print(f"page_size:   {settings.page_size}", file=out)
    print(f"chunk_size:  {settings.chunk_size}", file=out)
    print(f"region:      {settings.region or '-'}", file=out)


def dispatch(controller: ConsoleController, args: argparse.Namespace, out: TextIO) -> None:
    command = args.command
    if command == "buckets":
        lines = render_buckets(controller.view_buckets())
    elif command == "ls":
        listing = run_cancellable(
            lambda token: controller.list_objects(bucket_name=args.bucket, prefix=args.prefix, cancel=token),
            timeout=args.timeout,
        )
        lines = render_listing(listing)
    elif command == "stat":
        view = controller.object_info(bucket_name=args.bucket, key=args.key)
        lines = render_object_details(view.details) + [f"Parent:        {view.parent_prefix}"]
    elif command == "get":
        _write_object(controller, args, out)
        return
    elif command == "put":
        key = controller.upload_file(bucket_name=args.bucket, prefix=args.prefix, source_path=args.source)
        lines = [f"uploaded {key}"]
    elif command == "rm":
        parent = controller.remove_object(bucket_name=args.bucket, key=args.key)
        lines = [f"deleted {args.key} (now at {parent})"]
    elif command == "mb":
        controller.create_bucket(args.bucket)
        lines = [f"created {args.bucket}"]
    elif command == "rb":
        controller.remove_bucket(args.bucket)
        lines = [f"removed {args.bucket}"]
    else:  # pragma: no cover - argparse rejects unknown commands
        raise ConsoleError(f"Unknown command '{command}'")
    for line in lines:
        print(line, file=out)


LOCAL_COMMANDS = {"profile": manage_profiles, "config": manage_settings}


def main(
    argv: Sequence[str] | None = None,
    *,
    controller: ConsoleController | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if controller is None:
            settings_storage = SettingsStorage()
            controller = ConsoleController(
                settings=resolve_settings(args, settings_storage),
                settings_storage=settings_storage,
            )
        if args.command in LOCAL_COMMANDS:
            LOCAL_COMMANDS[args.command](controller, args, out)
            return EXIT_OK
        if args.profile:
            controller.connect_with_profile(args.profile)
        else:
            controller.connect(resolve_profile(args))
        dispatch(controller, args, out)
    except Cancelled:
        LOGGER.debug("Command '%s' cancelled", args.command)
        print("cancelled", file=err)
        return EXIT_CANCELLED
    except ConsoleError as exc:
        print(f"error: {exc}", file=err)
        return EXIT_ERROR
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=err)
        return EXIT_ERROR
    return EXIT_OK
