import unittest
from pathlib import Path

from hamcrest import (
    assert_that, is_, contains_exactly, has_length, raises, calling, none,
    has_key)
from ruamel.yaml import YAML

from portlinks.bases import ProfileError, TransportKind
from portlinks import yaml_tools

PROFILES_YAML = '''\
profiles:
  studio:
    description: studio setup
    transport: sequencer
    connections:
      - from: Keystation
        to: fluidsynth
      - label: synth to daw
        transport: pipewire
        from_pattern: "synth:out_\\\\d"
        to: "daw:in"
        to_context: daw
      - from: Keystation
        to: fluidsynth
        to_port: 2
'''


class LoadStringTest(unittest.TestCase):

    def test_profiles_map(self):
        profiles = yaml_tools.load_string(PROFILES_YAML, 'test.yaml')
        assert_that(profiles, has_key('studio'))

        studio = profiles['studio']
        assert_that(studio.description, is_('studio setup'))
        assert_that(studio.origin, is_('test.yaml'))
        assert_that(studio.connections, has_length(3))

        first, second, third = studio.connections
        assert_that(first.transport, is_(TransportKind.SEQUENCER))
        assert_that(first.label, is_('Keystation -> fluidsynth'))
        assert_that(first.source_regex, is_(False))

        assert_that(second.transport, is_(TransportKind.GRAPH))
        assert_that(second.label, is_('synth to daw'))
        assert_that(second.source_pattern, is_(r'synth:out_\d'))
        assert_that(second.source_regex, is_(True))
        assert_that(second.dest_context, is_('daw'))

        assert_that(third.dest_port, is_(2))
        assert_that(third.source_port, is_(0))

    def test_connections_list_is_an_anonymous_profile(self):
        profiles = yaml_tools.load_string(
            'connections:\n'
            '  - {transport: alsa, from: a, to: b}\n',
            'mine.yaml', 'mine')
        assert_that(list(profiles.keys()), contains_exactly('mine'))
        assert_that(profiles['mine'].connections, has_length(1))

    def test_wrong_connections_are_skipped(self):
        profiles = yaml_tools.load_string(
            'connections:\n'
            '  - just a string\n'
            '  - {from: a, to: b}\n'
            '  - {transport: alsa, from: a}\n'
            '  - {transport: bluetooth, from: a, to: b}\n'
            '  - {transport: graph, from_pattern: "(", to: b}\n'
            '  - {transport: alsa, from: a, to: b, to_port: -1}\n'
            '  - {transport: alsa, from: a, to: b, to_port: "x"}\n'
            '  - {transport: graph, from: "a:out", to: "b:in"}\n',
            'bad.yaml', 'bad')
        conns = profiles['bad'].connections
        assert_that(conns, has_length(2))
        assert_that(conns[0].dest_port, is_(0))
        assert_that(conns[1].transport, is_(TransportKind.GRAPH))

    def test_item_at_wrong_type(self):
        profiles = yaml_tools.load_string(
            'profiles:\n'
            '  a:\n'
            '    connections: not a list\n'
            '  b: 12\n',
            'types.yaml')
        assert_that(list(profiles.keys()), contains_exactly('a'))
        assert_that(profiles['a'].connections, has_length(0))
        assert_that(profiles['a'].description, is_(''))

    def test_not_a_map(self):
        assert_that(
            calling(yaml_tools.load_string).with_args('- a\n- b\n', 'x.yaml'),
            raises(ProfileError, 'not a yaml map'))

    def test_invalid_yaml(self):
        assert_that(
            calling(yaml_tools.load_string).with_args(
                'profiles: [a, b\n', 'broken.yaml'),
            raises(ProfileError, 'broken.yaml'))

    def test_missing_file(self):
        assert_that(
            calling(yaml_tools.load_file).with_args(
                Path('/nonexistent/portlinks.yaml')),
            raises(ProfileError, 'unable to read'))

    def test_item_at(self):
        yaml_map = YAML().load('name: edo72\ncount: 3\nflag: true\n')
        assert_that(yaml_tools.item_at(yaml_map, 'name', str), is_('edo72'))
        assert_that(yaml_tools.item_at(yaml_map, 'count', int), is_(3))
        assert_that(yaml_tools.item_at(yaml_map, 'count', str), is_(none()))
        assert_that(yaml_tools.item_at(yaml_map, 'flag', int), is_(none()))
        assert_that(yaml_tools.item_at(yaml_map, 'missing', str), is_(none()))


if __name__ == '__main__':
    unittest.main()
