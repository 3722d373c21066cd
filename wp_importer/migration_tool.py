"""
High-level orchestration of the WordPress → portal import.

This module defines a :class:`WordPressImportTool` class that ties together
the extractors, parsers, migrators and utilities into a complete pipeline.
It reads a WordPress SQL dump (optionally extracting it from a ``.wpress``
archive first), maps the dump rows to typed records, and writes users,
categories, tags and posts with their relationships and featured images to
the portal database.  Per-item problems are logged and skipped; only
environment failures (missing dump, unreachable database, no author to
assign posts to) abort the run.

Configuration is supplied via a JSON file path or directly as a dictionary,
with three sections: ``source`` (where the dump is), ``portal`` (where the
content goes) and ``migration`` (what to import and how).
"""

from __future__ import annotations

import copy
import dataclasses
import hashlib
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from models.news_post import NewsPost
from models.wordpress import WPPost
from wp_importer.extractors.relations import (
    PostTerms,
    featured_images,
    map_category_slug,
    post_terms,
    select_posts,
    taxonomy_descriptions,
    taxonomy_terms,
)
from wp_importer.extractors.wordpress_extractor import WordPressDump, extract_wordpress_dump
from wp_importer.extractors.wpress_archive import extract_database
from wp_importer.migrators.media import download_image
from wp_importer.migrators.portal_store import PortalStore
from wp_importer.parsers.content import (
    clean_content,
    generate_excerpt,
    map_post_status,
    parse_wp_datetime,
    slugify,
    strip_html,
)
from wp_importer.utils.errors import REPORT_DIR, report_error, report_ok
from wp_importer.utils.pre_flight_checks import PreFlightCheckError, run_pre_flight_checks
from wp_importer.utils.redirects import generate_redirects_csv


@dataclass
class ImportSummary:
    users: int = 0
    categories: int = 0
    tags: int = 0
    posts_imported: int = 0
    posts_skipped: int = 0
    posts_failed: int = 0
    relationships: int = 0
    featured_images: int = 0
    media_downloaded: int = 0
    rows_skipped: int = 0
    redirects_path: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _humanize(slug: str) -> str:
    return slug.replace("-", " ").strip().title()


def _hash_password(password: str) -> str:
    return "sha256$" + hashlib.sha256(password.encode("utf-8")).hexdigest()


class WordPressImportTool:
    """
    Encapsulates all state and behavior required to import a WordPress
    backup into the portal.  This class is responsible for reading
    configuration, loading and parsing the dump, and writing the content.
    Detailed success and failure information is recorded using the
    :mod:`wp_importer.utils.errors` module.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            # Default configuration
            config = {}
        else:
            # Defaults below must not leak into the caller's dict
            config = copy.deepcopy(config)

        # Ensure essential keys exist to prevent KeyErrors
        config.setdefault("source", {})
        config["source"].setdefault("sql_path", os.getenv("WP_SQL_PATH", os.path.join("wp-backup", "database.sql")))
        config["source"].setdefault("wpress_path", os.getenv("WP_WPRESS_PATH", ""))
        config["source"].setdefault("extract_dir", "wp-backup")
        config["source"].setdefault("table_prefix", os.getenv("WP_TABLE_PREFIX", "SERVMASK_PREFIX_"))

        config.setdefault("portal", {})
        config["portal"].setdefault("db_path", os.getenv("PORTAL_DB_PATH", os.path.join("data", "portal.duckdb")))
        config["portal"].setdefault("base_url", "")
        config["portal"].setdefault("uploads_dir", os.path.join("public", "uploads"))
        config["portal"].setdefault("uploads_url", "/uploads")

        config.setdefault("migration", {})
        config["migration"].setdefault("dry_run", False)
        config["migration"].setdefault("limit", None)
        config["migration"].setdefault("import_users", True)
        config["migration"].setdefault("post_statuses", ["publish"])
        config["migration"].setdefault("default_password", "changeme123")
        config["migration"].setdefault("category_mapping", {})
        config["migration"].setdefault("default_category", "")
        config["migration"].setdefault("url_rewrites", {})
        config["migration"].setdefault("download_media", False)
        config["migration"].setdefault("overwrite_featured_images", False)
        config["migration"].setdefault("wordpress_domain", "")

        self.config = config
        self.log_file = os.path.join(REPORT_DIR, "import.log")

    def log_message(self, message: str, level: str = "INFO") -> None:
        print(f"[{level}] {message}")
        # Append to log file
        os.makedirs(os.path.dirname(self.log_file), exist_ok=True)
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    # Loading ---------------------------------------------------------------

    def load_dump(self) -> str:
        """Read the whole SQL dump, extracting it from the ``.wpress`` archive first if configured."""
        source = self.config["source"]
        sql_path = source["sql_path"]
        if source.get("wpress_path"):
            self.log_message(f"Extracting database.sql from {source['wpress_path']}")
            extracted = extract_database(source["wpress_path"], source["extract_dir"])
            if not extracted:
                raise PreFlightCheckError(f"No database.sql found inside {source['wpress_path']}")
            sql_path = extracted

        self.log_message(f"Reading: {sql_path}")
        with open(sql_path, "r", encoding="utf-8", errors="replace") as f:
            sql = f.read()
        self.log_message(f"SQL file size: {len(sql) / 1024 / 1024:.2f} MB")
        return sql

    def parse_dump(self, sql: str) -> WordPressDump:
        prefix = self.config["source"]["table_prefix"]
        self.log_message(f"Parsing WordPress data (table prefix '{prefix}')...")
        dump = extract_wordpress_dump(sql, prefix)
        for table, count in dump.counts().items():
            self.log_message(f"- {table}: {count}")
        for skipped in dump.skipped:
            self.log_message(f"Skipping {skipped.table} row {skipped.index}: {skipped.reason}", level="WARNING")
            report_error("ROW_SKIPPED", {"wp_id": f"{skipped.table}#{skipped.index}", "reason": skipped.reason})
        return dump

    # Pipeline --------------------------------------------------------------

    def run(self) -> ImportSummary:
        """
        Run the complete import.  If ``dry_run`` is enabled in the
        configuration the dump is parsed and every step is logged, but the
        portal database is never opened.

        :raises PreFlightCheckError: on environment failures.
        """
        dry_run: bool = bool(self.config["migration"]["dry_run"])
        run_pre_flight_checks(self.config, check_database=not dry_run)

        sql = self.load_dump()
        dump = self.parse_dump(sql)
        del sql

        if dry_run:
            return self.migrate(dump, None)
        with PortalStore(self.config["portal"]["db_path"]) as store:
            store.ensure_schema()
            return self.migrate(dump, store)

    def migrate(self, dump: WordPressDump, store: Optional[PortalStore]) -> ImportSummary:
        """Write ``dump`` to ``store``; with ``store=None`` only log what would be written."""
        migration = self.config["migration"]
        summary = ImportSummary(rows_skipped=len(dump.skipped))

        admin_id = store.get_admin_user_id() if store is not None else "dry-admin"
        user_ids: Dict[int, str] = {}
        if migration["import_users"]:
            user_ids = self._migrate_users(dump, store, summary)
        if not user_ids and not admin_id:
            raise PreFlightCheckError("No admin user found in the portal database and no WordPress users imported.")

        category_ids = self._migrate_categories(dump, store, summary)
        tag_ids = self._migrate_tags(dump, store, summary)
        migrated = self._migrate_posts(
            dump, store, summary,
            user_ids=user_ids,
            admin_id=admin_id,
            category_ids=category_ids,
            tag_ids=tag_ids,
        )

        try:
            summary.redirects_path = generate_redirects_csv(
                migrated,
                old_domain=migration["wordpress_domain"],
                new_base=self.config["portal"]["base_url"],
                out_path=os.path.join("reports", "redirect_map.csv"),
            )
            self.log_message(f"Redirect CSV generated with {len(migrated)} entries")
        except OSError as e:
            self.log_message(f"Failed to generate redirects: {e}", "ERROR")

        self._log_summary(summary, dry_run=store is None)
        return summary

    def _migrate_users(self, dump: WordPressDump, store: Optional[PortalStore], summary: ImportSummary) -> Dict[int, str]:
        self.log_message("--- Importing users ---")
        password = _hash_password(self.config["migration"]["default_password"])
        user_ids: Dict[int, str] = {}
        for wp_user in dump.users:
            item = {"wp_id": wp_user.id, "slug": wp_user.user_login, "title": wp_user.display_name}
            if not wp_user.user_email:
                report_error("USER_NO_EMAIL", item)
                continue
            if store is None:
                user_ids[wp_user.id] = f"dry-user-{wp_user.id}"
                self.log_message(f"Dry-run: would import user {wp_user.user_login}")
                continue
            try:
                user_ids[wp_user.id] = store.upsert_user(
                    email=wp_user.user_email,
                    username=wp_user.user_login.lower(),
                    name=wp_user.display_name or wp_user.user_login,
                    password=password,
                )
                self.log_message(f"User: {wp_user.user_login} -> {user_ids[wp_user.id]}")
            except Exception as e:
                report_error("USER_IMPORT", item, e)
                self.log_message(f"Error importing user {wp_user.user_login}: {e}", "ERROR")
        summary.users = len(user_ids)
        return user_ids

    def _ensure_category(self, store: Optional[PortalStore], name: str, slug: str, description: Optional[str] = None) -> str:
        if store is None:
            return f"dry-category-{slug}"
        return store.upsert_category(name, slug, description)

    def _migrate_categories(self, dump: WordPressDump, store: Optional[PortalStore], summary: ImportSummary) -> Dict[int, str]:
        """Create portal categories; returns WordPress term_taxonomy_id -> portal id."""
        self.log_message("--- Importing categories ---")
        migration = self.config["migration"]
        descriptions = taxonomy_descriptions(dump)
        category_ids: Dict[int, str] = {}
        for tt_id, term in taxonomy_terms(dump, "category").items():
            wp_slug = term.slug or slugify(term.name)
            portal_slug = map_category_slug(wp_slug, migration["category_mapping"], migration["default_category"])
            name = term.name if portal_slug == wp_slug else _humanize(portal_slug)
            try:
                category_ids[tt_id] = self._ensure_category(store, name, portal_slug, descriptions.get(tt_id))
                self.log_message(f"Category: {term.name} -> {portal_slug}")
            except Exception as e:
                report_error("CATEGORY_IMPORT", {"wp_id": term.term_id, "slug": wp_slug, "title": term.name}, e)
        summary.categories = len(set(category_ids.values()))
        return category_ids

    def _migrate_tags(self, dump: WordPressDump, store: Optional[PortalStore], summary: ImportSummary) -> Dict[int, str]:
        """Create portal tags; returns WordPress term_taxonomy_id -> portal id."""
        self.log_message("--- Importing tags ---")
        tag_ids: Dict[int, str] = {}
        for tt_id, term in taxonomy_terms(dump, "post_tag").items():
            slug = term.slug or slugify(term.name)
            try:
                tag_ids[tt_id] = f"dry-tag-{slug}" if store is None else store.upsert_tag(term.name, slug)
            except Exception as e:
                report_error("TAG_IMPORT", {"wp_id": term.term_id, "slug": slug, "title": term.name}, e)
        summary.tags = len(set(tag_ids.values()))
        self.log_message(f"Tags: {summary.tags}")
        return tag_ids

    def build_post(
        self,
        wp_post: WPPost,
        *,
        slug: str,
        author_id: str,
        terms: Optional[PostTerms],
        category_ids: Dict[int, str],
        tag_ids: Dict[int, str],
        featured_image: Optional[str] = None,
        default_category_id: Optional[str] = None,
    ) -> NewsPost:
        """Convert a WordPress post into the portal's :class:`NewsPost`."""
        content = clean_content(wp_post.post_content)
        if wp_post.post_excerpt.strip():
            excerpt = strip_html(wp_post.post_excerpt)
        else:
            excerpt = generate_excerpt(content)
        status = map_post_status(wp_post.post_status)
        published = parse_wp_datetime(wp_post.post_date)
        modified = parse_wp_datetime(wp_post.post_modified) or published

        terms = terms or PostTerms([], [])
        post_categories = [category_ids[t] for t in terms.categories if t in category_ids]
        if not post_categories and default_category_id:
            post_categories = [default_category_id]
        post_tags = [tag_ids[t] for t in terms.tags if t in tag_ids]

        return NewsPost(
            title=wp_post.post_title,
            slug=slug,
            content=content,
            excerpt=excerpt or None,
            featured_image=featured_image,
            author_id=author_id,
            status=status,
            published_at=published if status in ("PUBLISHED", "SCHEDULED") else None,
            created_at=published,
            updated_at=modified,
            category_ids=post_categories,
            tag_ids=post_tags,
        )

    def _migrate_posts(
        self,
        dump: WordPressDump,
        store: Optional[PortalStore],
        summary: ImportSummary,
        *,
        user_ids: Dict[int, str],
        admin_id: Optional[str],
        category_ids: Dict[int, str],
        tag_ids: Dict[int, str],
    ) -> List[Dict[str, str]]:
        self.log_message("--- Importing posts ---")
        migration = self.config["migration"]
        portal = self.config["portal"]
        limit: Optional[int] = migration["limit"]
        relations = post_terms(dump)
        images = featured_images(dump, migration["url_rewrites"])
        posts = select_posts(dump, migration["post_statuses"])
        self.log_message(f"Found {len(posts)} posts to import")

        default_category_id = None
        if migration["default_category"]:
            slug = migration["default_category"]
            default_category_id = self._ensure_category(store, _humanize(slug), slug)

        migrated: List[Dict[str, str]] = []
        count = 0
        http = requests.Session() if migration["download_media"] and store is not None else None
        try:
            for wp_post in posts:
                if limit is not None and count >= limit:
                    break
                count += 1

                slug = wp_post.post_name or slugify(wp_post.post_title)
                item = {"wp_id": wp_post.id, "slug": slug, "title": wp_post.post_title}
                if not slug:
                    summary.posts_failed += 1
                    report_error("MISSING_SLUG", item)
                    continue

                author_id = user_ids.get(wp_post.post_author) or admin_id
                if not author_id:
                    summary.posts_failed += 1
                    report_error("MISSING_AUTHOR", item)
                    self.log_message(f"Skipping post {wp_post.id}: no author found", "WARNING")
                    continue

                try:
                    if store is not None and store.find_post_id_by_slug(slug):
                        summary.posts_skipped += 1
                        self.log_message(f"Skipped (exists): {wp_post.post_title[:50]}")
                        report_ok("POST_EXISTS", item)
                        continue

                    image_url = images.get(wp_post.id)
                    if image_url and migration["download_media"]:
                        if store is None:
                            self.log_message(f"Dry-run: would download {image_url}")
                        else:
                            local_url = download_image(
                                image_url, portal["uploads_dir"], public_prefix=portal["uploads_url"], session=http
                            )
                            if local_url:
                                image_url = local_url
                                summary.media_downloaded += 1
                            else:
                                report_error("MEDIA_DOWNLOAD", item)

                    news_post = self.build_post(
                        wp_post,
                        slug=slug,
                        author_id=author_id,
                        terms=relations.get(wp_post.id),
                        category_ids=category_ids,
                        tag_ids=tag_ids,
                        featured_image=image_url,
                        default_category_id=default_category_id,
                    )

                    if store is None:
                        self.log_message(f"Dry-run: would import post '{slug}'")
                    else:
                        post_id = store.insert_post(news_post)
                        report_ok("POST_IMPORTED", item, {"post_id": post_id})

                    summary.posts_imported += 1
                    summary.relationships += len(news_post.category_ids) + len(news_post.tag_ids)
                    if news_post.featured_image:
                        summary.featured_images += 1
                    migrated.append({
                        "Slug": news_post.slug,
                        "Permalink": wp_post.guid,
                        "NewURL": f"{portal['base_url'].rstrip('/')}/{news_post.slug}",
                    })
                except Exception as e:
                    summary.posts_failed += 1
                    report_error("POST_IMPORT", item, e)
                    self.log_message(f"Error importing post {wp_post.id}: {e}", "ERROR")
        finally:
            if http is not None:
                http.close()

        return migrated

    def update_featured_images(self, dump: WordPressDump, store: PortalStore) -> int:
        """Backfill featured images of already imported posts; returns the number updated."""
        migration = self.config["migration"]
        images = featured_images(dump, migration["url_rewrites"])
        updated = 0
        for wp_post in dump.posts:
            if wp_post.post_type != "post" or not wp_post.post_name:
                continue
            url = images.get(wp_post.id)
            if not url:
                continue
            if store.set_featured_image(wp_post.post_name, url, overwrite=migration["overwrite_featured_images"]):
                updated += 1
                report_ok("FEATURED_IMAGE_SET", {"wp_id": wp_post.id, "slug": wp_post.post_name}, {"url": url})
        self.log_message(f"Featured images updated: {updated}")
        return updated

    def _log_summary(self, summary: ImportSummary, *, dry_run: bool) -> None:
        self.log_message("=" * 50)
        self.log_message("Import completed!" + (" (dry-run)" if dry_run else ""))
        self.log_message(f"  Users: {summary.users}")
        self.log_message(f"  Categories: {summary.categories}")
        self.log_message(f"  Tags: {summary.tags}")
        self.log_message(f"  Posts imported: {summary.posts_imported}")
        self.log_message(f"  Posts skipped (already exist): {summary.posts_skipped}")
        self.log_message(f"  Posts failed: {summary.posts_failed}")
        self.log_message(f"  Relationships: {summary.relationships}")
        self.log_message(f"  Posts with featured image: {summary.featured_images}")
        self.log_message(f"  Dump rows skipped: {summary.rows_skipped}")
        self.log_message("=" * 50)
