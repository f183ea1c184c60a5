import pytest

from whooktown.models import (
    Activity,
    Band,
    Building,
    Grid,
    Layout,
    Location,
    Orientation,
    SensorData,
    Status,
    Token,
    TrafficState,
    list_of,
)
from whooktown.workflow_client import (
    CreateWorkflowRequest,
    and_node,
    camera_control_node,
    compare_node,
    const_node,
    input_node,
    not_node,
    output_node,
    select_node,
    traffic_control_node,
)


def test_sensor_data_uses_wire_names_and_drops_unset_fields():
    data = SensorData(id='s-1', status=Status.CRITICAL, activity=Activity.FAST, cpu_usage=87,
                      tower_text='HELLO', face_rotation=True)
    assert data.to_dict() == {
        'id': 's-1',
        'status': 'critical',
        'activity': 'fast',
        'cpuUsage': 87,
        'towerText': 'HELLO',
        'faceRotationEnabled': True,
    }


def test_sensor_data_extra_does_not_override_known_fields():
    data = SensorData(id='s-1', status=Status.ONLINE, extra={'status': 'offline', 'customMetric': 3})
    out = data.to_dict()
    assert out['status'] == 'online'
    assert out['customMetric'] == 3
    assert 'extra' not in out


def test_sensor_data_bands_serialize_nested():
    data = SensorData(id='eq', band_count=3, bands=[Band('bass', 80), Band('mid', 40), Band('high', 10)])
    out = data.to_dict()
    assert out['bandCount'] == 3
    assert out['bands'][0] == {'name': 'bass', 'value': 80}


def test_layout_nested_serialization():
    layout = Layout(
        name='Prod',
        grid=Grid(10, 10),
        buildings=[Building('b1', 'bank', Location(1, 2), orientation=Orientation.NE)],
    )
    assert layout.to_dict() == {
        'name': 'Prod',
        'grid': {'width': 10, 'height': 10},
        'buildings': [{'id': 'b1', 'type': 'bank', 'location': {'x': 1, 'y': 2}, 'orientation': 'NE'}],
    }


def test_token_from_dict_maps_app_token_and_ignores_unknown_keys():
    token = Token.from_dict({'app_token': 'abc', 'type': 'sensor', 'unexpected': 1})
    assert token.token == 'abc'
    assert token.type == 'sensor'


def test_list_of_decodes_arrays_and_null():
    decode = list_of(TrafficState)
    states = decode([{'layout_id': 'l1', 'density': 40, 'speed': 'fast', 'enabled': True}])
    assert states[0].density == 40 and states[0].enabled
    assert decode(None) == []
    with pytest.raises(TypeError):
        decode({'layout_id': 'l1'})


def test_from_dict_rejects_non_objects():
    with pytest.raises(TypeError):
        Token.from_dict(['abc'])


def test_node_builders():
    assert input_node('a', 'sensor-1').to_dict() == {'id': 'a', 'operator': 'input', 'name': 'sensor-1'}
    assert output_node('o', 'sensor-2', ['a']).to_dict() == {
        'id': 'o', 'operator': 'output', 'name': 'sensor-2', 'inputs': ['a'],
    }
    assert const_node('c', 'online').to_dict() == {'id': 'c', 'operator': 'const', 'name': 'online'}
    assert not_node('n', 'a').inputs == ['a']
    sel = select_node('s', ['a', 'b'], ['online', 'critical'], ['c1'])
    assert sel.to_dict()['condition'] == ['c1']
    assert sel.to_dict()['values'] == ['online', 'critical']


def test_control_node_builders():
    traffic = traffic_control_node('t', 'l1', 80, 'fast', True, ['a']).to_dict()
    assert traffic == {
        'id': 't', 'operator': 'traffic_control', 'inputs': ['a'],
        'layout_id': 'l1', 'density': 80, 'speed': 'fast', 'enabled': True,
    }
    camera = camera_control_node('cam', 'l1', 'p1', 'play', ['a']).to_dict()
    assert camera['path_id'] == 'p1' and camera['action'] == 'play'


def test_with_latch_sets_latch_value():
    node = and_node('x', ['a', 'b']).with_latch('critical')
    assert node.to_dict() == {
        'id': 'x', 'operator': 'and', 'inputs': ['a', 'b'], 'latch': True, 'latchValue': 'critical',
    }


@pytest.mark.parametrize('op', ['lt', 'le', 'gt', 'ge', 'eq', 'ne'])
def test_compare_node_accepts_known_operators(op):
    assert compare_node('cmp', op, ['a', 'b']).operator == op


def test_compare_node_rejects_unknown_operator():
    with pytest.raises(ValueError):
        compare_node('cmp', 'between', ['a'])


def test_workflow_request_serializes_graph():
    req = CreateWorkflowRequest(name='Cluster', graph={'a': input_node('a', 's1')}, enabled=True)
    assert req.to_dict() == {
        'name': 'Cluster',
        'graph': {'a': {'id': 'a', 'operator': 'input', 'name': 's1'}},
        'enabled': True,
    }
