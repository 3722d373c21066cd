from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class WPRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class WPUser(WPRecord):
    id: int
    user_login: str
    user_email: str = ""
    display_name: str = ""


class WPPost(WPRecord):
    id: int
    post_author: int = 0
    post_date: str = ""
    post_content: str = ""
    post_title: str = ""
    post_excerpt: str = ""
    post_status: str = ""
    post_name: str = ""
    post_modified: str = ""
    guid: str = ""
    post_type: str = ""


class WPTerm(WPRecord):
    term_id: int
    name: str
    slug: str = ""


class WPTermTaxonomy(WPRecord):
    term_taxonomy_id: int
    term_id: int
    taxonomy: str
    description: str = ""
    count: int = 0


class WPTermRelationship(WPRecord):
    object_id: int
    term_taxonomy_id: int


class WPPostMeta(WPRecord):
    meta_id: int
    post_id: int
    meta_key: str = ""
    meta_value: str = ""
