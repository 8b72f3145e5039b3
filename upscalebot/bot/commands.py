"""
Chat command parsing.

Pure functions that turn message text into jobs and replies; nothing
here talks to Discord.
"""
from pathlib import PurePosixPath
from typing import List, Optional, Sequence
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from ..core.interfaces import UpscaleJob
from ..core.errors import CommandError
from ..core.extensions import is_image_url, is_upscalable
from ..upscaler.models import ModelRegistry

DEFAULT_FILTER = "box"
MODELS_PER_ROW = 4

HELP_TEMPLATE = """
Commands:

`{prefix}upscale [model]` // Upscales attached image using specified model

`{prefix}upscale [url] [model]` // Upscales linked image using specified model

`{prefix}add [model url] [nickname]` // Adds model from url, with a nickname (to avoid typing out long model names)

`{prefix}models` // Lists all models

`{prefix}help` // Shows this information again

Optional upscale args:

`-downscale [amount]` // Downscales the image by the amount listed

`-filter [imagemagick filter]` // Filter to be used for downscaling. Must be valid imagemagick filter. Defaults to box.

`-montage` // Creates a side by side comparison of the LR and result after upscaling

Example: `{prefix}upscale www.imageurl.com/image.png 4xBox.pth -downscale 4 -filter point -montage`"""


@dataclass
class ParsedCommand:
    """A prefixed chat command split into name and arguments."""
    name: str
    args: List[str]


def parse_command(content: str, prefix: str) -> Optional[ParsedCommand]:
    """Split a message into command and args; None if it lacks the prefix."""
    if not content.startswith(prefix):
        return None

    args = content[len(prefix):].split()
    if not args:
        return None

    return ParsedCommand(name=args.pop(0).lower(), args=args)


def sanitize_url(url: str) -> str:
    """Drop query strings and trailing parameters from an image url."""
    return url.split("&")[0].split("?")[0]


def image_name_from_url(url: str) -> str:
    """Last path segment of the decoded url path, used as the staged file name."""
    return PurePosixPath(unquote(urlparse(url).path)).name


def is_safe_name(name: str) -> bool:
    """True if name is a plain file name that stays inside its folder."""
    return bool(name) and "/" not in name and "\\" not in name and not name.startswith(".")


def _option_value(args: Sequence[str], flag: str) -> Optional[str]:
    if flag not in args:
        return None
    index = list(args).index(flag)
    if index + 1 >= len(args):
        raise CommandError(f"Missing value for {flag}.")
    return args[index + 1]


def parse_downscale(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        factor = float(value)
    except ValueError:
        raise CommandError(f"Downscale amount must be a number, got {value}.")
    if factor <= 0:
        raise CommandError("Downscale amount must be greater than zero.")
    return factor


def build_upscale_job(
    args: Sequence[str],
    registry: ModelRegistry,
    attachment_url: Optional[str] = None,
    reply_target=None,
    requester: str = "there"
) -> UpscaleJob:
    """
    Build an UpscaleJob from ``upscale`` arguments.

    Raises:
        CommandError: with a message meant for the requester
    """
    args = list(args)
    if not args:
        raise CommandError(f"You didn't provide any arguments, {requester}!")

    if attachment_url:
        url = attachment_url
    elif is_image_url(args[0]):
        url = args.pop(0)
    else:
        raise CommandError("Not a valid command.")

    url = sanitize_url(url)
    image = image_name_from_url(url)

    if not args:
        raise CommandError("You didn't specify a model.")

    model = registry.resolve(args[0])
    if model is None:
        raise CommandError("Not a valid model.")

    if not is_safe_name(image) or not is_upscalable(image):
        raise CommandError("Sorry, that image cannot be processed.")

    return UpscaleJob(
        source_url=url,
        model=model,
        image=image,
        reply_target=reply_target,
        downscale=parse_downscale(_option_value(args, "-downscale")),
        filter=_option_value(args, "-filter") or DEFAULT_FILTER,
        montage="-montage" in args,
    )


def format_models_table(names: Sequence[str], per_row: int = MODELS_PER_ROW) -> str:
    """Model names laid out in aligned rows, wrapped in a code block."""
    if not names:
        return "No models installed."

    rows = [list(names[i:i + per_row]) for i in range(0, len(names), per_row)]
    widths = [0] * per_row
    for row in rows:
        for i, name in enumerate(row):
            widths[i] = max(widths[i], len(name))

    lines = [
        "  ".join(name.ljust(widths[i]) for i, name in enumerate(row)).rstrip()
        for row in rows
    ]
    return "```\n" + "\n".join(lines) + "\n```"


def help_text(prefix: str) -> str:
    return HELP_TEMPLATE.format(prefix=prefix)


def queued_message(job: UpscaleJob, position: int) -> str:
    """Reply for a freshly enqueued job."""
    if position <= 1:
        return "Your image is being processed."
    return (
        f"{job.image} has been added to the queue! "
        f"Your image is #{position} in line for processing."
    )
