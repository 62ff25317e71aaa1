"""System checks for capability-gated views."""

from django.core.checks import Error, register
from django.urls import URLPattern, URLResolver, get_resolver

from access_control.permissions import CapabilityPermission
from access_control.policy import Capability


def _iter_view_classes(patterns):
    for pattern in patterns:
        if isinstance(pattern, URLResolver):
            yield from _iter_view_classes(pattern.url_patterns)
        elif isinstance(pattern, URLPattern):
            callback = pattern.callback
            view_cls = getattr(callback, "cls", None) or getattr(callback, "view_class", None)
            if view_cls is not None:
                yield view_cls


@register()
def capability_views_declare_requirements(app_configs, **kwargs):
    """Ensure views using CapabilityPermission declare required_capabilities.

    Every routed view is inspected, so new endpoints are covered without
    registering them here.
    """
    errors: list[Error] = []
    seen = set()

    for view_cls in _iter_view_classes(get_resolver().url_patterns):
        if view_cls in seen:
            continue
        seen.add(view_cls)

        permission_classes = getattr(view_cls, "permission_classes", [])
        if CapabilityPermission not in permission_classes:
            continue

        mapping = getattr(view_cls, "required_capabilities", None)
        if not mapping:
            errors.append(
                Error(
                    f"{view_cls.__name__} uses CapabilityPermission but does not "
                    f"define required_capabilities.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )
            continue

        for key, capability in mapping.items():
            if capability is not None and not isinstance(capability, Capability):
                errors.append(
                    Error(
                        f"{view_cls.__name__}.required_capabilities[{key!r}] is not a Capability.",
                        obj=view_cls,
                        id="access_control.E002",
                    )
                )

    return errors
