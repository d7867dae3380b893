from .header import Header
from .help_screen import HelpScreen
from .directory_prompt import DirectoryPromptScreen
from .playlist_dialogs import NEW_PLAYLIST, ConfirmScreen, PlaylistNameScreen, PlaylistPickerScreen

__all__ = [
    "Header",
    "HelpScreen",
    "DirectoryPromptScreen",
    "NEW_PLAYLIST",
    "ConfirmScreen",
    "PlaylistNameScreen",
    "PlaylistPickerScreen",
]
