"""
Tests for mesh -> Bedrock geometry conversion
"""


def sample_mesh():
    return {
        'name': "ruby_sword",
        'resolution': {'width': 32, 'height': 64},
        'elements': [
            {
                'uuid': "e1",
                'from': [0, 0, 0],
                'to': [2, 10, 2],
                'faces': {
                    'north': {'uv': [0, 0, 2, 10], 'texture': 0},
                    'south': {'uv': [2, 0, 4, 10]},
                    'up': None,
                },
            },
            {
                'uuid': "e2",
                'from': [-1, 10, -1],
                'to': [3, 11, 3],
                'rotation': [0, 45, 0],
                'origin': [1, 10, 1],
                'inflate': 0.25,
            },
            {'uuid': "e3", 'from': [0, 0, 0], 'to': [1, 1, 1]},
        ],
        'outliner': [
            {
                'name': "blade",
                'origin': [1, 0, 1],
                'rotation': [0, 0, 10],
                'children': [
                    "e1",
                    {'name': "guard", 'children': ["e2", "missing"]},
                ],
            },
            {'children': ["e3"]},
        ],
    }


class TestGeometryConverter:
    """Bone and cube conversion."""

    def test_description(self):
        from packforge.packaging.geometry import convert_to_bedrock

        geometry = convert_to_bedrock(sample_mesh(), "ruby_sword")
        assert geometry['format_version'] == "1.16.0"
        desc = geometry['minecraft:geometry'][0]['description']
        assert desc['identifier'] == "geometry.ruby_sword"
        assert desc['texture_width'] == 32
        assert desc['texture_height'] == 64
        assert desc['visible_bounds_offset'] == [0, 0.25, 0]

    def test_bones_and_hierarchy(self):
        from packforge.packaging.geometry import convert_to_bedrock

        bones = convert_to_bedrock(sample_mesh(), "ruby_sword")['minecraft:geometry'][0]['bones']
        assert [b['name'] for b in bones] == ["blade", "guard", "bone_2"]
        blade, guard, unnamed = bones
        assert blade['pivot'] == [1, 0, 1]
        assert blade['rotation'] == [0, 0, 10]
        assert 'parent' not in blade
        assert guard['parent'] == "blade"
        assert guard['pivot'] == [0, 0, 0]
        assert len(guard['cubes']) == 1        # "missing" is ignored
        assert len(unnamed['cubes']) == 1

    def test_cube_size_and_uv(self):
        from packforge.packaging.geometry import convert_to_bedrock

        blade = convert_to_bedrock(sample_mesh(), "ruby_sword")['minecraft:geometry'][0]['bones'][0]
        cube = blade['cubes'][0]
        assert cube['origin'] == [0, 0, 0]
        assert cube['size'] == [2, 10, 2]
        assert 'rotation' not in cube and 'pivot' not in cube
        assert cube['uv']['north'] == {'uv': [0, 0], 'uv_size': [2, 10], 'texture': 0}
        assert cube['uv']['south'] == {'uv': [2, 0], 'uv_size': [2, 10]}
        assert 'up' not in cube['uv']

    def test_rotated_cube_carries_pivot_and_inflate(self):
        from packforge.packaging.geometry import GeometryConverter

        mesh = sample_mesh()
        cube = GeometryConverter.convert_element(mesh['elements'][1])
        assert cube['rotation'] == [0, 45, 0]
        assert cube['pivot'] == [1, 10, 1]
        assert cube['inflate'] == 0.25
        assert cube['size'] == [4, 1, 4]

    def test_missing_numbers_default_to_zero(self):
        from packforge.packaging.geometry import GeometryConverter

        cube = GeometryConverter.convert_element({'from': [1, "x"], 'to': None})
        assert cube['origin'] == [1, 0, 0]
        assert cube['size'] == [-1, 0, 0]

    def test_defaults_without_resolution(self):
        from packforge.packaging.geometry import convert_to_bedrock

        geometry = convert_to_bedrock({'outliner': [], 'elements': []}, "empty")
        desc = geometry['minecraft:geometry'][0]['description']
        assert desc['texture_width'] == 16
        assert geometry['minecraft:geometry'][0]['bones'] == []

    def test_structural_failure_returns_none(self):
        from packforge.packaging.geometry import convert_to_bedrock

        # uv is not a sequence: only this model fails
        broken = {'outliner': [{'name': "b", 'children': ["e"]}],
                  'elements': [{'uuid': "e", 'faces': {'north': {'uv': 5}}}]}
        assert convert_to_bedrock(broken, "broken") is None
