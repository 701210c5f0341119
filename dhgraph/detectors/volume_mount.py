"""Volume and environment reference detector.

Workloads consume ConfigMaps, Secrets and PVCs through three independent
mechanisms, each reported with its own relationship type:

1. pod volumes (``volume_mount``, or ``pvc`` for claims), including the
   ConfigMap/Secret sources of projected volumes;
2. ``envFrom`` on containers (``env_from``);
3. ``env[].valueFrom`` key references on containers (``env_value_from``).

All targets live in the workload's own namespace.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from dhgraph.detectors.base import Detector
from dhgraph.detectors.kinds import (
    CONFIG_MAP,
    PERSISTENT_VOLUME_CLAIM,
    SECRET,
    PodSpecLocation,
    pod_spec_location,
)
from dhgraph.fields import iter_maps, nested_name, nested_str
from dhgraph.graph.models import Relationship, RelationType
from dhgraph.models.resources import Resource, ResourceKey

_CONTAINER_LISTS = ("containers", "initContainers")


class VolumeMountDetector(Detector):
    """Detects ConfigMap, Secret and PVC consumption by workloads."""

    name = "volume_mount"
    priority = 80

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        location = pod_spec_location(resource.kind)
        if location is None:
            return
        yield from self._volumes(resource, location)
        yield from self._env_from(resource, location)
        yield from self._env_value_from(resource, location)

    # ------------------------------------------------------------------
    # Volumes
    # ------------------------------------------------------------------

    def _volumes(self, resource: Resource, location: PodSpecLocation) -> Iterator[Relationship]:
        namespace = resource.namespace
        for volume in iter_maps(resource.obj, *location.path, "volumes"):
            volume_name = nested_str(volume, "name") or ""

            cm_name = nested_name(volume, "configMap", "name")
            if cm_name is not None:
                yield self.edge(
                    resource,
                    CONFIG_MAP.key(namespace, cm_name),
                    RelationType.VOLUME_MOUNT,
                    location.field("volumes[].configMap"),
                    volume_name=volume_name,
                    config_map_name=cm_name,
                )

            secret_name = nested_name(volume, "secret", "secretName")
            if secret_name is not None:
                yield self.edge(
                    resource,
                    SECRET.key(namespace, secret_name),
                    RelationType.VOLUME_MOUNT,
                    location.field("volumes[].secret"),
                    volume_name=volume_name,
                    secret_name=secret_name,
                )

            claim_name = nested_name(volume, "persistentVolumeClaim", "claimName")
            if claim_name is not None:
                yield self.edge(
                    resource,
                    PERSISTENT_VOLUME_CLAIM.key(namespace, claim_name),
                    RelationType.PVC,
                    location.field("volumes[].persistentVolumeClaim"),
                    volume_name=volume_name,
                    pvc_name=claim_name,
                )

            yield from self._projected_sources(resource, location, volume, volume_name)

    def _projected_sources(
        self,
        resource: Resource,
        location: PodSpecLocation,
        volume: dict[str, Any],
        volume_name: str,
    ) -> Iterator[Relationship]:
        namespace = resource.namespace
        for source in iter_maps(volume, "projected", "sources"):
            cm_name = nested_name(source, "configMap", "name")
            if cm_name is not None:
                yield self.edge(
                    resource,
                    CONFIG_MAP.key(namespace, cm_name),
                    RelationType.VOLUME_MOUNT,
                    location.field("volumes[].projected.sources[].configMap"),
                    volume_name=volume_name,
                    config_map_name=cm_name,
                )

            # projected secrets use "name", unlike secret volumes
            secret_name = nested_name(source, "secret", "name")
            if secret_name is not None:
                yield self.edge(
                    resource,
                    SECRET.key(namespace, secret_name),
                    RelationType.VOLUME_MOUNT,
                    location.field("volumes[].projected.sources[].secret"),
                    volume_name=volume_name,
                    secret_name=secret_name,
                )

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def _containers(self, resource: Resource, location: PodSpecLocation) -> Iterator[tuple[str, dict[str, Any]]]:
        for list_name in _CONTAINER_LISTS:
            for container in iter_maps(resource.obj, *location.path, list_name):
                yield list_name, container

    def _env_from(self, resource: Resource, location: PodSpecLocation) -> Iterator[Relationship]:
        namespace = resource.namespace
        for list_name, container in self._containers(resource, location):
            container_name = nested_str(container, "name") or ""
            for env_from in iter_maps(container, "envFrom"):
                cm_name = nested_name(env_from, "configMapRef", "name")
                if cm_name is not None:
                    yield self.edge(
                        resource,
                        CONFIG_MAP.key(namespace, cm_name),
                        RelationType.ENV_FROM,
                        location.field(f"{list_name}[].envFrom[].configMapRef"),
                        container_name=container_name,
                        config_map_name=cm_name,
                    )

                secret_name = nested_name(env_from, "secretRef", "name")
                if secret_name is not None:
                    yield self.edge(
                        resource,
                        SECRET.key(namespace, secret_name),
                        RelationType.ENV_FROM,
                        location.field(f"{list_name}[].envFrom[].secretRef"),
                        container_name=container_name,
                        secret_name=secret_name,
                    )

    def _env_value_from(self, resource: Resource, location: PodSpecLocation) -> Iterator[Relationship]:
        namespace = resource.namespace
        for list_name, container in self._containers(resource, location):
            for env_var in iter_maps(container, "env"):
                env_var_name = nested_str(env_var, "name") or ""

                cm_ref = nested_name(env_var, "valueFrom", "configMapKeyRef", "name")
                if cm_ref is not None:
                    yield self.edge(
                        resource,
                        CONFIG_MAP.key(namespace, cm_ref),
                        RelationType.ENV_VALUE_FROM,
                        location.field(f"{list_name}[].env[].valueFrom.configMapKeyRef"),
                        env_var_name=env_var_name,
                        config_map_name=cm_ref,
                        key=nested_str(env_var, "valueFrom", "configMapKeyRef", "key") or "",
                    )

                secret_ref = nested_name(env_var, "valueFrom", "secretKeyRef", "name")
                if secret_ref is not None:
                    yield self.edge(
                        resource,
                        SECRET.key(namespace, secret_ref),
                        RelationType.ENV_VALUE_FROM,
                        location.field(f"{list_name}[].env[].valueFrom.secretKeyRef"),
                        env_var_name=env_var_name,
                        secret_name=secret_ref,
                        key=nested_str(env_var, "valueFrom", "secretKeyRef", "key") or "",
                    )
