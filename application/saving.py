"""Save-dialog request model and local validation."""

from pydantic import BaseModel, ConfigDict

from domain.errors import SaveValidationError


class SaveRequest(BaseModel):
    """
    What the user asked to save.

    Either `parent_project_id` names an existing project, or `create_new_project`
    is set and `new_project_name` names the project to create first.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    parent_project_id: str | None = None
    create_new_project: bool = False
    new_project_name: str = ""


def validate_save_request(request: SaveRequest) -> None:
    """
    Reject a save request before any persistence call.

    Raises:
        SaveValidationError: Blank sub-project name, no parent project selected,
            or (create-new flow) blank new project name
    """
    if not request.name.strip():
        raise SaveValidationError("Sub-project name is required.")
    if request.create_new_project:
        if not request.new_project_name.strip():
            raise SaveValidationError("New parent project name is required.")
        return
    if not (request.parent_project_id or "").strip():
        raise SaveValidationError("A parent project must be selected.")
