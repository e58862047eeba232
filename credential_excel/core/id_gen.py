"""UUID v7 based identifiers for credential document nodes."""

from uuid_extensions import uuid7

ID_NAMESPACE = "urn:epass"


def generate_id(node_type: str) -> str:
    """Generate a document node id of the form urn:epass:<node_type>:<uuid7>.

    Args:
        node_type: e.g. "credential", "learningAchievement", "assessment",
            "learningActivity", "learningOutcome"

    Returns:
        String like "urn:epass:assessment:01926f4e-8b7d-7a8e-9c0d-1e2f3a4b5c6d"
    """
    return f"{ID_NAMESPACE}:{node_type}:{uuid7()}"
