"""Domain records exchanged with the XML API.

Field aliases are the attribute and element names used on the wire, so the
same model reads ``<sco sco-id="..."><url-path>...</url-path></sco>`` and
writes ``sco-id=...&url-path=...``.
"""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ConnectModel(BaseModel):
    """Base for records addressed by their XML names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UserInfo(ConnectModel):
    """Currently logged in user, from the ``common-info`` action."""

    user_id: str = Field(..., alias="user-id")
    type: Optional[str] = Field(None, description="Principal type, e.g. 'user'")
    name: str = Field(..., description="Display name")
    login: str = Field(..., description="Login name")


class MeetingUpdateItem(ConnectModel):
    """Input of ``sco-update``.

    Pass ``folder_id`` to create a new SCO inside that folder, or ``sco_id``
    to update the metadata of an existing one, never both.
    """

    sco_id: Optional[str] = Field(None, alias="sco-id")
    folder_id: Optional[str] = Field(None, alias="folder-id")
    type: Optional[str] = Field(None, description="SCO type, e.g. 'meeting'")
    name: Optional[str] = None
    description: Optional[str] = None
    url_path: Optional[str] = Field(None, alias="url-path")
    date_begin: Optional[datetime] = Field(None, alias="date-begin")
    date_end: Optional[datetime] = Field(None, alias="date-end")
    lang: Optional[str] = None
    source_sco_id: Optional[str] = Field(None, alias="source-sco-id")

    @model_validator(mode="after")
    def exactly_one_target(self):
        if bool(self.sco_id) == bool(self.folder_id):
            raise ValueError("Provide either 'sco_id' or 'folder_id', but not both")
        if self.folder_id and not self.name:
            raise ValueError("A name is required when creating a new SCO")
        return self


class MeetingDetail(ConnectModel):
    """SCO description returned by ``sco-update`` when it creates an object."""

    sco_id: str = Field(..., alias="sco-id")
    folder_id: Optional[str] = Field(None, alias="folder-id")
    type: Optional[str] = None
    icon: Optional[str] = None
    name: str
    description: Optional[str] = None
    url_path: Optional[str] = Field(None, alias="url-path")
    date_begin: Optional[datetime] = Field(None, alias="date-begin")
    date_end: Optional[datetime] = Field(None, alias="date-end")
    date_created: Optional[datetime] = Field(None, alias="date-created")
    date_modified: Optional[datetime] = Field(None, alias="date-modified")

    # Derived from url_path and the service endpoint
    full_url: str = ""


class MeetingItem(ConnectModel):
    """One row of a meeting or folder listing."""

    sco_id: str = Field(..., alias="sco-id")
    folder_id: Optional[str] = Field(None, alias="folder-id")
    type: Optional[str] = None
    icon: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    domain_name: Optional[str] = Field(None, alias="domain-name")
    url_path: Optional[str] = Field(None, alias="url-path")
    date_begin: Optional[datetime] = Field(None, alias="date-begin")
    date_end: Optional[datetime] = Field(None, alias="date-end")
    expired: Optional[bool] = None

    # Derived once when the item is produced; folders have no date_begin
    duration: Optional[timedelta] = None
    full_url: str = ""
