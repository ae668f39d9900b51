"""Protocol layer: command buffer, request builders, JSON envelope codec and payload parsing."""

from .buffer import CommandBuffer
from .codec import check_workspace_path_valid, send_json
from .commands import CommandId, build_command
