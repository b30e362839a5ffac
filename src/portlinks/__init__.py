'''portlinks connects MIDI ports of the ALSA sequencer (aconnect)
and of the PipeWire graph (pw-link) following a profile.'''

__version__ = '0.1.0'
