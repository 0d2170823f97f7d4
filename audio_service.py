import os
import glob
import random
import asyncio
import shutil
from typing import List, Optional


class AudioService:
    """Plays an audible cue when a reminder that requests sound fires"""

    def __init__(self, audio_directory: str = "data/audio", player: Optional[str] = None):
        self.audio_directory = audio_directory
        # afplay on macOS, paplay/aplay on Linux desktops
        self.player = player or next(
            (name for name in ('afplay', 'paplay', 'aplay') if shutil.which(name)), None
        )
        self.audio_files: List[str] = []
        self._scan_audio_files()

    def _scan_audio_files(self):
        """Scan audio directory for reminder cues"""
        if not os.path.exists(self.audio_directory):
            print(f"Warning: Audio directory '{self.audio_directory}' not found")
            return

        for pattern in ("reminder*.mp3", "reminder*.wav"):
            self.audio_files.extend(sorted(glob.glob(os.path.join(self.audio_directory, pattern))))

        if self.audio_files:
            print(f"🔊 Audio Service: Found {len(self.audio_files)} reminder sounds")
        else:
            print("No audio files found")

    async def play_reminder_audio(self) -> bool:
        """Play a random reminder cue without waiting for playback to finish"""
        if not self.audio_files or not self.player:
            return False

        audio_file = random.choice(self.audio_files)
        try:
            await asyncio.create_subprocess_exec(
                self.player, audio_file,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL
            )
            print(f"🔊 Playing {os.path.basename(audio_file)}")
            return True
        except OSError as e:
            print(f"Error playing audio: {e}")
            return False
