"""Workflow definitions and graph node builders.

A workflow graph maps node ids to ``FlowNode`` descriptions. The client only
serializes nodes; evaluation happens server side.

Example:
    graph = {
        'a': input_node('a', 'sensor-1'),
        'b': input_node('b', 'sensor-2'),
        'both': and_node('both', ['a', 'b']),
        'out': output_node('out', 'cluster-status', ['both']),
    }
    client.workflow.create(CreateWorkflowRequest(name='Cluster', graph=graph, enabled=True))
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .context import CallContext
from .models import Model, Workflow, json_name, list_of
from .transport import Transport

COMPARE_OPERATORS = ('lt', 'le', 'gt', 'ge', 'eq', 'ne')


@dataclass
class FlowNode(Model):
    id: str
    operator: str
    name: Optional[str] = None
    type: Optional[str] = None
    inputs: Optional[List[str]] = None
    values: Optional[List[str]] = None
    condition: Optional[List[str]] = None
    latch: Optional[bool] = None
    latch_value: Optional[str] = json_name('latchValue', default=None)
    # control nodes
    layout_id: Optional[str] = None
    density: Optional[int] = None
    speed: Optional[str] = None
    enabled: Optional[bool] = None
    command: Optional[str] = None
    mood: Optional[str] = None
    music_volume: Optional[int] = None
    path_id: Optional[str] = None
    action: Optional[str] = None
    group_id: Optional[str] = None
    output_field: Optional[str] = None
    output_value: Optional[str] = None

    def with_latch(self, latch_value: str) -> 'FlowNode':
        self.latch = True
        self.latch_value = latch_value
        return self


@dataclass
class CreateWorkflowRequest(Model):
    name: str
    graph: Dict[str, FlowNode] = field(default_factory=dict)
    id: Optional[str] = None
    worker: Optional[str] = None
    version: Optional[str] = None
    enabled: Optional[bool] = None


def input_node(node_id: str, sensor_id: str) -> FlowNode:
    return FlowNode(node_id, 'input', name=str(sensor_id))


def output_node(node_id: str, sensor_id: str, inputs: List[str]) -> FlowNode:
    return FlowNode(node_id, 'output', name=str(sensor_id), inputs=list(inputs))


def const_node(node_id: str, value: str) -> FlowNode:
    return FlowNode(node_id, 'const', name=value)


def select_node(node_id: str, inputs: List[str], values: List[str], conditions: List[str]) -> FlowNode:
    return FlowNode(node_id, 'select', inputs=list(inputs), values=list(values), condition=list(conditions))


def and_node(node_id: str, inputs: List[str]) -> FlowNode:
    return FlowNode(node_id, 'and', inputs=list(inputs))


def or_node(node_id: str, inputs: List[str]) -> FlowNode:
    return FlowNode(node_id, 'or', inputs=list(inputs))


def not_node(node_id: str, input_id: str) -> FlowNode:
    return FlowNode(node_id, 'not', inputs=[input_id])


def compare_node(node_id: str, operator: str, inputs: List[str]) -> FlowNode:
    if operator not in COMPARE_OPERATORS:
        raise ValueError(f"unknown comparison operator {operator!r}, expected one of {', '.join(COMPARE_OPERATORS)}")
    return FlowNode(node_id, operator, inputs=list(inputs))


def traffic_control_node(node_id: str, layout_id: str, density: int, speed: str, enabled: bool,
                         inputs: List[str]) -> FlowNode:
    return FlowNode(node_id, 'traffic_control', inputs=list(inputs), layout_id=layout_id, density=density,
                    speed=speed, enabled=enabled)


def camera_control_node(node_id: str, layout_id: str, path_id: str, action: str, inputs: List[str]) -> FlowNode:
    return FlowNode(node_id, 'camera_control', inputs=list(inputs), layout_id=layout_id, path_id=path_id,
                    action=action)


def group_control_node(node_id: str, group_id: str, output_field: str, output_value: str,
                       inputs: List[str]) -> FlowNode:
    return FlowNode(node_id, 'group_control', inputs=list(inputs), group_id=group_id, output_field=output_field,
                    output_value=output_value)


class WorkflowClient:
    def __init__(self, http: Transport):
        self.http = http

    def list(self, ctx: Optional[CallContext] = None) -> List[Workflow]:
        return self.http.fetch('/workflow', into=list_of(Workflow), ctx=ctx) or []

    def create(self, req: CreateWorkflowRequest, ctx: Optional[CallContext] = None) -> Optional[Workflow]:
        return self.http.submit('/workflow', req, into=Workflow.from_dict, ctx=ctx)

    def create_from_json(self, name: str, graph: Any, ctx: Optional[CallContext] = None) -> Optional[Workflow]:
        """Create a workflow from an already decoded graph document."""
        return self.http.submit('/workflow', {'name': name, 'graph': graph}, into=Workflow.from_dict, ctx=ctx)

    def delete(self, workflow_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/workflow/{workflow_id}", ctx=ctx)

    def set_enabled(self, workflow_id: str, enabled: bool, ctx: Optional[CallContext] = None) -> None:
        self.http.amend(f"/workflow/{workflow_id}/enabled", {'enabled': enabled}, ctx=ctx)

    def enable(self, workflow_id: str, ctx: Optional[CallContext] = None) -> None:
        self.set_enabled(workflow_id, True, ctx=ctx)

    def disable(self, workflow_id: str, ctx: Optional[CallContext] = None) -> None:
        self.set_enabled(workflow_id, False, ctx=ctx)

    def get_operations(self, ctx: Optional[CallContext] = None) -> Dict[str, Dict[str, Any]]:
        return self.http.fetch('/workflow/operation', into=dict, ctx=ctx) or {}

    def get_running(self, ctx: Optional[CallContext] = None) -> Dict[str, Any]:
        return self.http.fetch('/workflow/running', into=dict, ctx=ctx) or {}

    def health(self, ctx: Optional[CallContext] = None) -> Dict[str, Any]:
        return self.http.fetch('/workflow/health', into=dict, ctx=ctx) or {}
