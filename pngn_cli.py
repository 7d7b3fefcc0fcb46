#!/usr/bin/env python3
"""
🐧 PNGN Glyphline - Command Line Interface
==========================================
Copyright (c) 2025 PNGN-Tec LLC

Render a chat message or an image to the terminal.

```
pngn-glyphline text "Hello World" --entities entities.json
pngn-glyphline text "$(cat msg.txt)" --multiline --width 60
pngn-glyphline image photo.jpg --max-width 40 --max-height 15
```

The entity file holds a JSON list of Bot API or MTProto entity objects.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pngn_config import get_config
from pngn_blocks import DecodeError, photo_cell_box, render_image_block
from pngn_richtext import render_styled_text
from pngn_spans import annotations_from_dicts

logger = logging.getLogger('pngn_cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pngn-glyphline',
                                     description='PNGN rich text and image block renderer')
    parser.add_argument('--log-level', default=None,
                        help='Logging level (default: PNGN_LOG_LEVEL or WARNING)')
    commands = parser.add_subparsers(dest='command', required=True)

    text = commands.add_parser('text', help='Render styled message text')
    text.add_argument('text')
    text.add_argument('--entities', type=Path, default=None,
                      help='JSON file with a list of entity objects')
    text.add_argument('--multiline', action='store_true',
                      help='Keep newlines and wrap to --width')
    text.add_argument('--width', type=int, default=None,
                      help='Wrap width in columns (0 disables)')

    image = commands.add_parser('image', help='Render an image as half blocks')
    image.add_argument('path', type=Path)
    image.add_argument('--max-width', type=int, default=None)
    image.add_argument('--max-height', type=int, default=None)
    image.add_argument('--viewport', type=int, nargs=2, metavar=('COLS', 'ROWS'),
                       default=None, help='Derive bounds from a viewport size')

    return parser


def _render_text(args) -> str:
    entities = []
    if args.entities is not None:
        entities = json.loads(args.entities.read_text(encoding='utf-8'))
        if not isinstance(entities, list):
            raise ValueError(f"{args.entities}: expected a JSON list of entities")

    annotations = annotations_from_dicts(entities)
    return render_styled_text(args.text, annotations,
                              preserve_newlines=args.multiline,
                              wrap_width=args.width)


def _render_image(args) -> str:
    config = get_config()
    if args.viewport is not None:
        max_width, max_height = photo_cell_box(args.viewport[0], args.viewport[1])
    else:
        max_width = config.image.max_width_cells
        max_height = config.image.max_height_cells

    if args.max_width is not None:
        max_width = args.max_width
    if args.max_height is not None:
        max_height = args.max_height

    rendered, lines = render_image_block(args.path.read_bytes(), max_width, max_height)
    logger.info(f"Rendered {args.path} in {lines} lines")
    return rendered


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = (args.log_level or get_config().log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        sys.stderr.write(f"pngn-glyphline: unknown log level {level!r}\n")
        return 1
    logging.basicConfig(level=level,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        if args.command == 'text':
            output = _render_text(args)
        else:
            output = _render_image(args)
    except DecodeError as e:
        logger.error(f"Cannot render {args.path}: {e}")
        return 1
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        logger.error(str(e))
        return 1

    sys.stdout.write(output + '\n')
    return 0


if __name__ == "__main__":
    sys.exit(main())
