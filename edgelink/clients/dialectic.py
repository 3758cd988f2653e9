"""Dialectic project operations, multiplexed through one action endpoint."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from edgelink.api.dispatcher import ActionDispatcher, result_boundary
from edgelink.api.types import ApiResponse, FormPayload, RequestOptions

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient


class DialecticAction(str, Enum):
    """Closed set of actions understood by the dialectic service."""
    LIST_AVAILABLE_DOMAIN_TAGS = "listAvailableDomainTags"
    LIST_DOMAINS = "listDomains"
    LIST_AVAILABLE_DOMAINS = "listAvailableDomains"
    LIST_AVAILABLE_DOMAIN_OVERLAYS = "listAvailableDomainOverlays"
    FETCH_PROCESS_TEMPLATE = "fetchProcessTemplate"
    CREATE_PROJECT = "createProject"
    CLONE_PROJECT = "cloneProject"
    DELETE_PROJECT = "deleteProject"
    EXPORT_PROJECT = "exportProject"
    GET_PROJECT_DETAILS = "getProjectDetails"
    LIST_PROJECTS = "listProjects"
    UPDATE_PROJECT_INITIAL_PROMPT = "updateProjectInitialPrompt"
    UPDATE_PROJECT_DOMAIN = "updateProjectDomain"
    UPLOAD_PROJECT_RESOURCE_FILE = "uploadProjectResourceFile"
    GET_PROJECT_RESOURCE_CONTENT = "getProjectResourceContent"
    START_SESSION = "startSession"
    GET_SESSION_DETAILS = "getSessionDetails"
    UPDATE_SESSION_MODELS = "updateSessionModels"
    GENERATE_CONTRIBUTIONS = "generateContributions"
    GET_CONTRIBUTION_CONTENT_DATA = "getContributionContentData"
    GET_CONTRIBUTION_CONTENT_SIGNED_URL = "getContributionContentSignedUrl"
    SAVE_CONTRIBUTION_EDIT = "saveContributionEdit"
    SUBMIT_STAGE_RESPONSES = "submitStageResponses"
    GET_ITERATION_INITIAL_PROMPT_CONTENT = "getIterationInitialPromptContent"
    LIST_MODEL_CATALOG = "listModelCatalog"
    GET_STAGE_RECIPE = "getStageRecipe"
    LIST_STAGE_DOCUMENTS = "listStageDocuments"
    GET_ALL_STAGE_PROGRESS = "getAllStageProgress"
    SUBMIT_STAGE_DOCUMENT_FEEDBACK = "submitStageDocumentFeedback"
    GET_STAGE_DOCUMENT_FEEDBACK = "getStageDocumentFeedback"


class DialecticApiClient:
    """
    Every operation posts ``{action, payload}`` to the multiplexing endpoint.

    Payload keys are forwarded unchanged; they are the service's camelCase
    wire names. Project creation and resource upload go out as multipart.
    """

    def __init__(self, client: ApiClient):
        self.dispatcher = ActionDispatcher(client, client.settings.multiplex_endpoint)

    async def _call(
        self,
        action: DialecticAction,
        payload: Mapping[str, Any] | None = None,
        options: RequestOptions | None = None,
    ) -> ApiResponse[Any]:
        return await self.dispatcher.dispatch(action, payload, options)

    # Domains and templates

    @result_boundary
    async def list_available_domain_tags(self) -> ApiResponse[Any]:
        return await self._call(DialecticAction.LIST_AVAILABLE_DOMAIN_TAGS)

    @result_boundary
    async def list_domains(self) -> ApiResponse[Any]:
        return await self._call(DialecticAction.LIST_DOMAINS)

    @result_boundary
    async def list_available_domains(self, payload: Mapping[str, Any] | None = None) -> ApiResponse[Any]:
        return await self._call(DialecticAction.LIST_AVAILABLE_DOMAINS, payload)

    @result_boundary
    async def list_available_domain_overlays(self, stage_association: str) -> ApiResponse[Any]:
        return await self._call(
            DialecticAction.LIST_AVAILABLE_DOMAIN_OVERLAYS, {"stageAssociation": stage_association}
        )

    @result_boundary
    async def fetch_process_template(self, template_id: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.FETCH_PROCESS_TEMPLATE, {"templateId": template_id})

    # Projects

    @result_boundary
    async def create_project(
        self,
        project_name: str,
        *,
        initial_user_prompt: str | None = None,
        selected_domain_id: str | None = None,
        selected_domain_overlay_id: str | None = None,
        prompt_file: tuple[str, Any, str] | None = None,
    ) -> ApiResponse[Any]:
        """Create a project; ``prompt_file`` is ``(filename, content, content_type)``."""
        form = FormPayload()
        form.add_field("projectName", project_name)
        form.add_field("initialUserPromptText", initial_user_prompt)
        form.add_field("selectedDomainId", selected_domain_id)
        form.add_field("selectedDomainOverlayId", selected_domain_overlay_id)
        if prompt_file is not None:
            form.add_file("promptFile", *prompt_file)
        return await self.dispatcher.dispatch_form(DialecticAction.CREATE_PROJECT, form)

    @result_boundary
    async def clone_project(self, project_id: str, new_project_name: str | None = None) -> ApiResponse[Any]:
        payload: dict[str, Any] = {"projectId": project_id}
        if new_project_name is not None:
            payload["newProjectName"] = new_project_name
        return await self._call(DialecticAction.CLONE_PROJECT, payload)

    @result_boundary
    async def delete_project(self, project_id: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.DELETE_PROJECT, {"projectId": project_id})

    @result_boundary
    async def export_project(self, project_id: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.EXPORT_PROJECT, {"projectId": project_id})

    @result_boundary
    async def get_project_details(self, project_id: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_PROJECT_DETAILS, {"projectId": project_id})

    @result_boundary
    async def list_projects(self) -> ApiResponse[Any]:
        return await self._call(DialecticAction.LIST_PROJECTS)

    @result_boundary
    async def update_project_initial_prompt(self, project_id: str, new_initial_prompt: str) -> ApiResponse[Any]:
        return await self._call(
            DialecticAction.UPDATE_PROJECT_INITIAL_PROMPT,
            {"projectId": project_id, "newInitialPrompt": new_initial_prompt},
        )

    @result_boundary
    async def update_project_domain(self, project_id: str, selected_domain_id: str) -> ApiResponse[Any]:
        return await self._call(
            DialecticAction.UPDATE_PROJECT_DOMAIN,
            {"projectId": project_id, "selectedDomainId": selected_domain_id},
        )

    @result_boundary
    async def upload_project_resource_file(
        self,
        project_id: str,
        file: tuple[str, Any, str],
        *,
        resource_description: str | None = None,
    ) -> ApiResponse[Any]:
        form = FormPayload()
        form.add_field("projectId", project_id)
        form.add_field("resourceDescription", resource_description)
        form.add_file("file", *file)
        return await self.dispatcher.dispatch_form(DialecticAction.UPLOAD_PROJECT_RESOURCE_FILE, form)

    @result_boundary
    async def get_project_resource_content(self, resource_id: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_PROJECT_RESOURCE_CONTENT, {"resourceId": resource_id})

    # Sessions and contributions

    @result_boundary
    async def start_session(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.START_SESSION, payload)

    @result_boundary
    async def get_session_details(self, session_id: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_SESSION_DETAILS, {"sessionId": session_id})

    @result_boundary
    async def update_session_models(self, session_id: str, selected_model_ids: list[str]) -> ApiResponse[Any]:
        return await self._call(
            DialecticAction.UPDATE_SESSION_MODELS,
            {"sessionId": session_id, "selectedModelIds": list(selected_model_ids)},
        )

    @result_boundary
    async def generate_contributions(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GENERATE_CONTRIBUTIONS, payload)

    @result_boundary
    async def get_contribution_content_data(self, contribution_id: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_CONTRIBUTION_CONTENT_DATA, {"contributionId": contribution_id})

    @result_boundary
    async def get_contribution_content_signed_url(self, contribution_id: str) -> ApiResponse[Any]:
        return await self._call(
            DialecticAction.GET_CONTRIBUTION_CONTENT_SIGNED_URL, {"contributionId": contribution_id}
        )

    @result_boundary
    async def save_contribution_edit(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.SAVE_CONTRIBUTION_EDIT, payload)

    @result_boundary
    async def submit_stage_responses(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.SUBMIT_STAGE_RESPONSES, payload)

    @result_boundary
    async def get_iteration_initial_prompt_content(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_ITERATION_INITIAL_PROMPT_CONTENT, payload)

    @result_boundary
    async def list_model_catalog(self) -> ApiResponse[Any]:
        return await self._call(DialecticAction.LIST_MODEL_CATALOG)

    # Stages

    @result_boundary
    async def get_stage_recipe(self, stage_slug: str) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_STAGE_RECIPE, {"stageSlug": stage_slug})

    @result_boundary
    async def list_stage_documents(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.LIST_STAGE_DOCUMENTS, payload)

    @result_boundary
    async def get_all_stage_progress(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_ALL_STAGE_PROGRESS, payload)

    @result_boundary
    async def submit_stage_document_feedback(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.SUBMIT_STAGE_DOCUMENT_FEEDBACK, payload)

    @result_boundary
    async def get_stage_document_feedback(self, payload: Mapping[str, Any]) -> ApiResponse[Any]:
        return await self._call(DialecticAction.GET_STAGE_DOCUMENT_FEEDBACK, payload)
