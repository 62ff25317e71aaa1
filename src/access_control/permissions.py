"""DRF permission class gating views by declared capabilities."""

from rest_framework import permissions

from .policy import Capability, has_capability


class CapabilityPermission(permissions.BasePermission):
    """Check the capability a view declares for the current action.

    Views declare ``required_capabilities`` as a mapping from action name
    (viewsets) or lowercase HTTP method (plain views) to a
    :class:`Capability`, or ``None`` for public access. The ``"*"`` key is the
    fallback for anything not listed. Object-level ownership rules are not
    checked here; managers apply ``access_control.policy`` themselves.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        capability = self.required_capability(request, view)
        return has_capability(getattr(request, "user", None), capability)

    @staticmethod
    def required_capability(request, view) -> Capability | None:
        mapping = getattr(view, "required_capabilities", None) or {}
        key = getattr(view, "action", None) or request.method.lower()
        if key in mapping:
            return mapping[key]
        return mapping.get("*")


__all__ = ["CapabilityPermission"]
