#!/usr/bin/env python3
"""drivefs - Path-based access to Google Drive."""

import argparse
import logging
import sys
from typing import List, Optional

from drivefs import DriveFS, __version__
from filesystem import (
    BatchTransferError,
    FileSystem,
    FileSystemError,
    RemoteObject,
    build_registry,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger for console output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def print_objects(objects: List[RemoteObject]) -> None:
    """Print search results, one per line."""
    if not objects:
        print("No matches")
        return
    for obj in objects:
        kind = "dir " if obj.is_folder else "file"
        print(f"{kind}  {obj.id}  {obj.name}")


def print_batch_failures(error: BatchTransferError) -> None:
    for item, exc in error.result.failed:
        print(f"  {item}: {exc}")


def run(fs: FileSystem, args: argparse.Namespace) -> None:
    """Run the operation selected on the command line."""
    for extension in args.exclude or []:
        fs.exclude_file_extension(extension)

    if args.upload:
        if len(args.upload) == 1:
            file_id = fs.upload(args.upload[0], args.dest)
            print(f"Uploaded {args.upload[0]} ({file_id})")
        else:
            result = fs.upload_collection(args.upload, args.dest)
            print(f"Uploaded {len(result.succeeded)} files")

    elif args.download:
        if len(args.download) == 1:
            for local_path in fs.download(args.download[0]):
                print(f"Downloaded {local_path}")
        else:
            result = fs.download_multiple(args.download)
            print(f"Downloaded {len(result.succeeded)} files")

    elif args.mkdir:
        folder_id = fs.create_dir(args.mkdir)
        print(f"Created {args.mkdir} ({folder_id})")

    elif args.find:
        print_objects(fs.find_file_by_name(args.find))

    elif args.find_ext:
        print_objects(fs.find_file_by_extension(args.find_ext))

    elif args.find_dir:
        print_objects(fs.find_directory(args.find_dir))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Path-based access to Google Drive")
    parser.add_argument("--version", action="version", version=f"drivefs {__version__}")

    parser.add_argument("--upload", nargs="+", metavar="FILE",
                        help="Upload local files")
    parser.add_argument("--dest", type=str, default="",
                        help="Remote path for --upload, e.g. Reports/ or Reports/q1.txt; "
                             "folders above the last component must exist "
                             "(default: top level)")
    parser.add_argument("--download", nargs="+", metavar="PATH",
                        help="Download remote files by name")
    parser.add_argument("--mkdir", type=str, metavar="PATH",
                        help="Create a remote folder")
    parser.add_argument("--find", type=str, metavar="NAME",
                        help="Find files by exact name")
    parser.add_argument("--find-ext", type=str, metavar="EXT",
                        help="Find files whose name contains EXT")
    parser.add_argument("--find-dir", type=str, metavar="NAME",
                        help="Find folders by exact name")
    parser.add_argument("--exclude", action="append", metavar="EXT",
                        help="Refuse to transfer files with this extension (repeatable)")

    parser.add_argument("--credentials", type=str,
                        help="OAuth client secrets file (env: DRIVEFS_CREDENTIALS)")
    parser.add_argument("--token", type=str,
                        help="Cached OAuth token file (env: DRIVEFS_TOKEN)")
    parser.add_argument("--service-account", type=str,
                        help="Service account key file (env: DRIVEFS_SERVICE_ACCOUNT)")
    parser.add_argument("--mime-types", type=str,
                        help="MIME rule table (env: DRIVEFS_MIME_TYPES)")
    parser.add_argument("--download-dir", type=str,
                        help="Download directory (env: DRIVEFS_DOWNLOAD_DIR)")
    parser.add_argument("--verbose", action="store_true",
                        help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not any([args.upload, args.download, args.mkdir,
                args.find, args.find_ext, args.find_dir]):
        parser.print_help()
        return 2

    try:
        DriveFS.configure(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 2
    setup_logging(DriveFS.verbose)

    registry = build_registry()
    fs = registry.create("gdrive", **DriveFS.filesystem_options())

    try:
        run(fs, args)
    except BatchTransferError as e:
        print(f"Error: {e}")
        print_batch_failures(e)
        return 1
    except FileSystemError as e:
        print(f"Error: {e}")
        return 1
    finally:
        fs.terminate()
    return 0


if __name__ == "__main__":
    sys.exit(main())
