"""Shared fixtures for dhgraph integration tests.

Provides a fully wired analyzer plus a realistic application bundle
(web Deployment, Service, config, TLS Ingress with cert-manager) so the
tests can exercise the whole pipeline from manifests to a frozen graph.
"""

from __future__ import annotations

import pytest

from dhgraph.analyzer import Analyzer, build_analyzer
from dhgraph.models.config import AnalyzerConfig
from dhgraph.models.resources import Resource
from tests.factories import make_resource, make_workload

# ---------------------------------------------------------------------------
# Analyzer fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def analyzer() -> Analyzer:
    """Analyzer with the default detector set."""
    return build_analyzer()


@pytest.fixture
def domain_analyzer() -> Analyzer:
    """Analyzer with the vendor-domain detector enabled."""
    return build_analyzer(AnalyzerConfig(domain_group_enabled=True))


# ---------------------------------------------------------------------------
# Application bundle
# ---------------------------------------------------------------------------


def make_web_app(namespace: str = "shop") -> list[Resource]:
    """A typical web application rendered from one chart."""
    deployment = make_workload(
        "Deployment",
        "web",
        namespace,
        template_labels={"app": "web", "tier": "frontend"},
        pod_spec={
            "serviceAccountName": "web",
            "imagePullSecrets": [{"name": "registry"}],
            "containers": [
                {
                    "name": "web",
                    "image": "registry.example.com/web:1.4.2",
                    "envFrom": [{"configMapRef": {"name": "web-env"}}],
                    "env": [
                        {
                            "name": "DB_PASSWORD",
                            "valueFrom": {"secretKeyRef": {"name": "web-db", "key": "password"}},
                        }
                    ],
                    "volumeMounts": [{"name": "config", "mountPath": "/etc/web"}],
                }
            ],
            "volumes": [{"name": "config", "configMap": {"name": "web-config"}}],
        },
        service_name="web",
    )
    return [
        deployment,
        make_resource("Service", "web", namespace, spec={"selector": {"app": "web"}, "ports": [{"port": 80}]}),
        make_resource("ServiceAccount", "web", namespace),
        make_resource("ConfigMap", "web-env", namespace, data={"LOG_LEVEL": "info"}),
        make_resource("ConfigMap", "web-config", namespace, data={"app.yaml": "listen: 8080"}),
        make_resource("Secret", "web-db", namespace, type="Opaque"),
        make_resource("Secret", "registry", namespace, type="kubernetes.io/dockerconfigjson"),
        make_resource("Secret", "web-tls", namespace, type="kubernetes.io/tls"),
        make_resource(
            "Ingress",
            "web",
            namespace,
            annotations={
                "cert-manager.io/cluster-issuer": "letsencrypt",
                "nginx.ingress.kubernetes.io/proxy-body-size": "8m",
            },
            spec={
                "ingressClassName": "nginx",
                "tls": [{"hosts": ["shop.example.com"], "secretName": "web-tls"}],
                "rules": [
                    {
                        "host": "shop.example.com",
                        "http": {
                            "paths": [
                                {
                                    "path": "/",
                                    "pathType": "Prefix",
                                    "backend": {"service": {"name": "web", "port": {"number": 80}}},
                                }
                            ]
                        },
                    }
                ],
            },
        ),
        make_resource("ClusterIssuer", "letsencrypt", namespace=""),
        make_resource("IngressClass", "nginx", namespace=""),
        make_resource("IngressNginxController", "main", namespace=""),
    ]


@pytest.fixture
def web_app() -> list[Resource]:
    return make_web_app()
