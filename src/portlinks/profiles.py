
# Imports from standard library
import logging
from pathlib import Path
from typing import Optional

# third party imports
import xdg

from .bases import ProfileError
from . import yaml_tools
from .yaml_tools import Profile

_logger = logging.getLogger(__name__)

APP_DIR = 'portlinks'
PROFILES_FILE = 'profiles.yaml'
BUILTIN_ORIGIN = 'built-in'

# The keyboard port line of 'aconnect -l' is under its client line,
# 'CASIO USB-MIDI' as context excludes mirror clients (a2j, bridges)
# whose port names also contain the keyboard port name.
BUILTIN_PROFILES = '''\
profiles:
  edo72:
    description: keyboard -> edo72 -> REAPER
    connections:
      - label: keyboard -> edo72
        transport: sequencer
        from: CASIO USB-MIDI MIDI 1
        from_context: CASIO USB-MIDI
        to: edo72-in
      - label: edo72-out -> REAPER MIDI Input 1
        transport: graph
        from: "Midi-Bridge:edo72-out:(capture_0) out"
        to: "REAPER:MIDI Input 1"

  sampler:
    description: keyboard -> sampler -> REAPER
    connections:
      - label: keyboard -> sampler
        transport: sequencer
        from: CASIO USB-MIDI MIDI 1
        from_context: CASIO USB-MIDI
        to: sampler-in
      - label: immediate-out -> REAPER MIDI Input 1
        transport: graph
        from: "Midi-Bridge:sampler-immediate:(capture_0) immediate-out"
        to: "REAPER:MIDI Input 1"
      - label: sample-out -> REAPER MIDI Input 4
        transport: graph
        from: "Midi-Bridge:sampler-sample:(capture_0) sample-out"
        to: "REAPER:MIDI Input 4"
'''


def builtin_profiles() -> dict[str, Profile]:
    return yaml_tools.load_string(BUILTIN_PROFILES, BUILTIN_ORIGIN)

def search_dirs(config_dir: Optional[Path] = None) -> list[Path]:
    '''directories where profiles.yaml files are searched,
    by order of priority.'''
    if config_dir is not None:
        dirs = [config_dir]
    else:
        dirs = [xdg.xdg_config_home() / APP_DIR]

    for conf_dir in xdg.xdg_config_dirs():
        dirs.append(conf_dir / APP_DIR)
    return dirs

def all_profiles(config_dir: Optional[Path] = None) -> dict[str, Profile]:
    '''all available profiles, a profile of a higher priority
    directory hides the profile with the same name in others.'''
    profiles = builtin_profiles()

    for search_dir in reversed(search_dirs(config_dir)):
        profiles_path = search_dir / PROFILES_FILE
        if not profiles_path.is_file():
            continue

        profiles.update(yaml_tools.load_file(profiles_path))

    return profiles

def find_profile(target: str, profile_name: Optional[str] = None,
                 config_dir: Optional[Path] = None) -> Profile:
    '''find the profile to use.

    `target` is a path to a yaml file or a profile name.
    If the file contains many profiles, `profile_name` is required.'''
    target_path = Path(target).expanduser()
    if target.endswith(('.yaml', '.yml')) or target_path.is_file():
        if not target_path.is_file():
            raise ProfileError(f'profile file {target} does not exist')

        file_profiles = yaml_tools.load_file(target_path)
        if profile_name is not None:
            profile = file_profiles.get(profile_name)
            if profile is None:
                raise ProfileError(
                    f"no profile '{profile_name}' in {target}")
            return profile

        if len(file_profiles) == 1:
            return next(iter(file_profiles.values()))

        if not file_profiles:
            raise ProfileError(f'no profile found in {target}')

        raise ProfileError(
            f'{target} contains many profiles, choose one with --profile: '
            + ', '.join(file_profiles.keys()))

    profiles = all_profiles(config_dir)
    profile = profiles.get(target)
    if profile is None:
        raise ProfileError(
            f"unknown profile '{target}', available profiles: "
            + ', '.join(sorted(profiles.keys())))

    _logger.debug(f"use profile '{profile.name}' from {profile.origin}")
    return profile
