#!/usr/bin/env python3
"""
StegoAVI - Command Line Interface
Hide text in AVI files using LSB steganography
"""

import argparse
import logging
import sys

from avisteg import (
    StreamCategory, ParseError, InsufficientSpaceError, MessageNotFoundError,
    hide_in_avi, extract_from_avi, get_avi_capacity, get_avi_info
)
from avisteg.utils import format_size, save_file

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARSE = 2
EXIT_NO_SPACE = 3
EXIT_NOT_FOUND = 4

# Stream names accepted by -s/--streams
STREAMS = {
    'junk': (StreamCategory.JUNK,),
    'video': (StreamCategory.VIDEO_UNCOMPRESSED, StreamCategory.VIDEO_COMPRESSED),
    'video-uncompressed': (StreamCategory.VIDEO_UNCOMPRESSED,),
    'video-compressed': (StreamCategory.VIDEO_COMPRESSED,),
    'audio': (StreamCategory.AUDIO,),
}
DEFAULT_STREAMS = ['junk', 'video', 'audio']


def setup_logging(verbosity: int):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='[%(levelname)s] %(message)s')


def get_categories(streams: list) -> list:
    """Expand stream names into stream categories, keeping their order."""
    categories = []
    for name in streams:
        for category in STREAMS[name]:
            if category not in categories:
                categories.append(category)
    return categories


def cmd_hide(args):
    """Hide a message in an AVI file."""
    categories = get_categories(args.streams)

    try:
        result_path, result = hide_in_avi(
            args.carrier, args.data, args.output,
            categories=categories, force=args.force
        )
    except ParseError as e:
        print(f"Error: Invalid AVI file: {e}", file=sys.stderr)
        return EXIT_PARSE
    except InsufficientSpaceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_NO_SPACE
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(f"✓ Message hidden successfully!")
    print(f"  Output: {result_path}")

    if args.verbose:
        print(f"  Hidden: {result.bytes_written - 1} characters")
        print(f"  Chunks: {result.chunks_used}")
        print(f"  Streams: {', '.join(str(c) for c in result.categories_used)}")
        if result.skipped:
            print(f"  Skipped (compressed): {', '.join(str(c) for c in result.skipped)}")

    return EXIT_OK


def cmd_extract(args):
    """Extract a hidden message from an AVI file."""
    categories = get_categories(args.streams)

    try:
        message = extract_from_avi(args.carrier, categories=categories, force=args.force)
    except ParseError as e:
        print(f"Error: Invalid AVI file: {e}", file=sys.stderr)
        return EXIT_PARSE
    except MessageNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(f"✓ Message extracted successfully!")

    if args.output:
        saved = save_file(message.encode('latin-1'), args.output)
        print(f"  Saved to: {saved}")
    else:
        print(f"  Message: {message}")

    return EXIT_OK


def cmd_capacity(args):
    """Show carrier capacity."""
    categories = get_categories(args.streams)

    try:
        capacity = get_avi_capacity(args.carrier, categories)
    except ParseError as e:
        print(f"Error: Invalid AVI file: {e}", file=sys.stderr)
        return EXIT_PARSE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(f"Carrier: {args.carrier}")
    print(f"Capacity: {format_size(capacity.total_bytes)}")

    if args.verbose:
        print("\nCapacity by stream:")
        for category, size in capacity.per_category.items():
            print(f"  {category}: {format_size(size)}")

    return EXIT_OK


def cmd_info(args):
    """Show AVI header details."""
    try:
        info = get_avi_info(args.carrier)
    except ParseError as e:
        print(f"Error: Invalid AVI file: {e}", file=sys.stderr)
        return EXIT_PARSE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(f"Carrier: {args.carrier}")
    print(f"Format: {info['riff']}/{info['form'].strip()} ({format_size(info['file_size'])})")
    print(f"Frame size: {info['width']}x{info['height']}")
    print(f"Frames: {info['total_frames']} at {info['frames_per_second']:.2f} fps")
    print(f"Streams: {info['streams']}")
    print(f"Video: {info['video_handler']!r}, "
          f"{'compressed' if info['video_compressed'] else 'uncompressed'}")
    print(f"Audio: {'compressed' if info['audio_compressed'] else 'uncompressed'}")
    print("Chunks:")
    for category, count in info['chunks'].items():
        print(f"  {category}: {count}")

    return EXIT_OK


def add_stream_arguments(parser, force: bool = True):
    parser.add_argument('-s', '--streams', nargs='+', choices=list(STREAMS),
                        default=DEFAULT_STREAMS,
                        help='Streams to use, in order (default: junk video audio)')
    if force:
        parser.add_argument('-f', '--force', action='store_true',
                            help='Use compressed streams as well')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Verbose output (repeat for debug logging)')


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='stegoavi',
        description='Hide text in AVI files using LSB steganography',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Hide a message in the junk chunks of a video
  stegoavi hide "Secret message" movie.avi -s junk

  # Hide a text file, allowing compressed video chunks
  stegoavi hide secret.txt movie.avi -o output.avi -s junk video -f

  # Extract hidden data (use the same streams and force flag)
  stegoavi extract output.avi -s junk video -f

  # Check carrier capacity
  stegoavi capacity movie.avi -v
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Hide command
    hide_parser = subparsers.add_parser('hide', help='Hide a message in an AVI file')
    hide_parser.add_argument('data', help='Text message or text file path to hide')
    hide_parser.add_argument('carrier', help='Carrier AVI file')
    hide_parser.add_argument('-o', '--output', help='Output file path')
    add_stream_arguments(hide_parser)
    hide_parser.set_defaults(func=cmd_hide)

    # Extract command
    extract_parser = subparsers.add_parser('extract', help='Extract a hidden message')
    extract_parser.add_argument('carrier', help='AVI file with hidden message')
    extract_parser.add_argument('-o', '--output', help='Save message to this file')
    add_stream_arguments(extract_parser)
    extract_parser.set_defaults(func=cmd_extract)

    # Capacity command
    capacity_parser = subparsers.add_parser('capacity', help='Show carrier capacity')
    capacity_parser.add_argument('carrier', help='Carrier file to check')
    add_stream_arguments(capacity_parser, force=False)
    capacity_parser.set_defaults(func=cmd_capacity)

    # Info command
    info_parser = subparsers.add_parser('info', help='Show AVI header details')
    info_parser.add_argument('carrier', help='AVI file to inspect')
    info_parser.add_argument('-v', '--verbose', action='count', default=0,
                             help='Verbose output (repeat for debug logging)')
    info_parser.set_defaults(func=cmd_info)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    setup_logging(args.verbose)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
