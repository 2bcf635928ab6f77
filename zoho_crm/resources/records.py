"""Record operations: CRUD, bulk writes, search and pagination."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterator, Sequence, TypeVar

from ..core.errors import InvalidRequest, ResourceNotFound
from ..core.models import ActionResult, HttpMethod, Page, PageInfo
from ..http.builder import OperationBuilder
from ..http.params import (
    MAX_PER_PAGE,
    MAX_RECORDS_PER_CALL,
    TRIGGERS,
    ListOptions,
    SearchOptions,
    UpsertOptions,
)
from .base import Resource, identity

logger = logging.getLogger(__name__)

T = TypeVar("T")

Decoder = Callable[[dict[str, Any]], T]


def _check_batch(items: Sequence[Any], what: str = "records") -> None:
    if not items:
        raise InvalidRequest("at least one item is required", field=what)
    if len(items) > MAX_RECORDS_PER_CALL:
        raise InvalidRequest(
            f"at most {MAX_RECORDS_PER_CALL} items per call, got {len(items)}",
            field=what,
        )


def _action_results(payload: Any) -> list[ActionResult]:
    return [ActionResult.from_dict(item) for item in payload["data"]]


def _empty_page(page: int | None, per_page: int | None) -> Page:
    return Page(
        records=[],
        info=PageInfo(page=page or 1, per_page=per_page or MAX_PER_PAGE, count=0, more_records=False),
    )


class PageIterator(Generic[T]):
    """
    Lazy sequence of pages.

    Nothing is fetched until iteration starts. Every call to iter() starts
    again from the first page, and each page is its own API call made with
    the page number following the previous page's metadata. Iteration stops
    after a page reports more_records = False.
    """

    def __init__(self, fetch: Callable[[int], Page[T]], start_page: int = 1):
        self._fetch = fetch
        self.start_page = start_page

    def __iter__(self) -> Iterator[Page[T]]:
        page_number = self.start_page
        while True:
            page = self._fetch(page_number)
            yield page
            if not page.info.more_records:
                return
            page_number = page.info.page + 1

    def records(self) -> Iterator[T]:
        """Iterate over records across all pages."""
        for page in self:
            yield from page.records


class RecordsResource(Resource):
    """Operations on the records of a module (e.g. Leads, Accounts, Deals)."""

    # ===== READ =====

    def get(
        self,
        module: str,
        record_id: str,
        decode: Decoder | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Fetch a single record.

        Args:
            module: Module API name (e.g. "Accounts")
            record_id: Zoho record ID
            decode: Converts the record's JSON object (default: return the dict)
            timeout: Per-call timeout in seconds

        Returns:
            The decoded record

        Raises:
            ResourceNotFound: If the record does not exist
        """
        decode = decode or identity
        operation = (
            OperationBuilder()
            .method(HttpMethod.GET)
            .path(module, record_id)
            .timeout(timeout)
            .build()
        )

        def decode_single(payload: Any) -> Any:
            # Zoho answers 204 No Content when the record does not exist
            if payload is None or not payload["data"]:
                raise ResourceNotFound(f"{module} record {record_id} not found")
            return decode(payload["data"][0])

        return self._execute(operation, decode_single)

    def list(
        self,
        module: str,
        options: ListOptions | None = None,
        decode: Decoder | None = None,
        timeout: float | None = None,
    ) -> Page:
        """
        Fetch one page of records.

        Args:
            module: Module API name
            options: Field selection, sorting, paging, custom view, ...
            decode: Converts each record's JSON object
            timeout: Per-call timeout in seconds

        Returns:
            Page with the records and pagination info
        """
        options = options or ListOptions()
        builder = (
            OperationBuilder()
            .method(HttpMethod.GET)
            .path(module)
            .params(options.to_params())
            .timeout(timeout)
        )
        for name, value in options.to_headers():
            builder.header(name, value)

        return self._execute(builder.build(), self._page_decoder(decode, options.page, options.per_page))

    def pages(
        self,
        module: str,
        options: ListOptions | None = None,
        decode: Decoder | None = None,
        timeout: float | None = None,
    ) -> PageIterator:
        """Lazily iterate over all pages of a module, starting at options.page."""
        options = options or ListOptions()
        return PageIterator(
            lambda page: self.list(module, options.with_page(page), decode=decode, timeout=timeout),
            start_page=options.page or 1,
        )

    def iter_records(
        self,
        module: str,
        options: ListOptions | None = None,
        decode: Decoder | None = None,
        timeout: float | None = None,
    ) -> Iterator[Any]:
        """Iterate over every record of a module, fetching pages as needed."""
        return self.pages(module, options, decode=decode, timeout=timeout).records()

    def search(
        self,
        module: str,
        options: SearchOptions,
        decode: Decoder | None = None,
        timeout: float | None = None,
    ) -> Page:
        """
        Search records by criteria, email, phone or word.

        Returns:
            Page of matches (empty when nothing matched)
        """
        operation = (
            OperationBuilder()
            .method(HttpMethod.GET)
            .path(module, "search")
            .params(options.to_params())
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, self._page_decoder(decode, options.page, options.per_page))

    def search_pages(
        self,
        module: str,
        options: SearchOptions,
        decode: Decoder | None = None,
        timeout: float | None = None,
    ) -> PageIterator:
        """Lazily iterate over all pages of search results."""
        return PageIterator(
            lambda page: self.search(module, options.with_page(page), decode=decode, timeout=timeout),
            start_page=options.page or 1,
        )

    @staticmethod
    def _page_decoder(decode: Decoder | None, page: int | None, per_page: int | None):
        decode = decode or identity

        def decode_page(payload: Any) -> Page:
            if payload is None:
                return _empty_page(page, per_page)
            return Page(
                records=[decode(item) for item in payload["data"]],
                info=PageInfo.from_dict(payload["info"]),
            )

        return decode_page

    # ===== WRITE =====

    def create(
        self,
        module: str,
        records: Sequence[dict[str, Any]],
        trigger: Sequence[str] | None = None,
        timeout: float | None = None,
    ) -> list[ActionResult]:
        """
        Insert records.

        Record-level failures are reported per item rather than as an
        error, so check ActionResult.is_success for each entry.

        Args:
            module: Module API name
            records: Up to 100 records
            trigger: Automation to run ("workflow", "approval", "blueprint");
                an empty list runs none

        Returns:
            One ActionResult per record, in order
        """
        _check_batch(records)
        body: dict[str, Any] = {"data": list(records)}
        if trigger is not None:
            unknown = [t for t in trigger if t not in TRIGGERS]
            if unknown:
                raise InvalidRequest(f"unknown trigger(s): {', '.join(unknown)}", field="trigger")
            body["trigger"] = list(trigger)

        operation = (
            OperationBuilder()
            .method(HttpMethod.POST)
            .path(module)
            .body(body)
            .timeout(timeout)
            .build()
        )
        results = self._execute(operation, _action_results)
        logger.info(f"Inserted into {module}: {sum(r.is_success for r in results)}/{len(results)} succeeded")
        return results

    def update(
        self,
        module: str,
        record_id: str,
        record: dict[str, Any],
        timeout: float | None = None,
    ) -> ActionResult:
        """Update a single record by ID."""
        operation = (
            OperationBuilder()
            .method(HttpMethod.PUT)
            .path(module, record_id)
            .body({"data": [record]})
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, lambda payload: _action_results(payload)[0])

    def update_many(
        self,
        module: str,
        records: Sequence[dict[str, Any]],
        timeout: float | None = None,
    ) -> list[ActionResult]:
        """
        Update several records; each record must carry its "id".

        Returns:
            One ActionResult per record, in order
        """
        _check_batch(records)
        for index, record in enumerate(records):
            if not record.get("id"):
                raise InvalidRequest(f"record {index} has no id", field="id")

        operation = (
            OperationBuilder()
            .method(HttpMethod.PUT)
            .path(module)
            .body({"data": list(records)})
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, _action_results)

    def upsert(
        self,
        module: str,
        records: Sequence[dict[str, Any]],
        options: UpsertOptions | None = None,
        timeout: float | None = None,
    ) -> list[ActionResult]:
        """
        Insert records, or update them when a duplicate is found.

        Duplicates are detected on options.duplicate_check_fields, or the
        module's unique fields when none are given. ActionResult.action
        tells whether each record was inserted or updated.
        """
        _check_batch(records)
        body = (options or UpsertOptions()).apply({"data": list(records)})
        operation = (
            OperationBuilder()
            .method(HttpMethod.POST)
            .path(module, "upsert")
            .body(body)
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, _action_results)

    def delete(self, module: str, record_id: str, timeout: float | None = None) -> ActionResult:
        """Delete a single record by ID."""
        operation = (
            OperationBuilder()
            .method(HttpMethod.DELETE)
            .path(module, record_id)
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, lambda payload: _action_results(payload)[0])

    def delete_many(
        self,
        module: str,
        record_ids: Sequence[str],
        wf_trigger: bool | None = None,
        timeout: float | None = None,
    ) -> list[ActionResult]:
        """Delete up to 100 records by ID."""
        _check_batch(record_ids, what="ids")
        operation = (
            OperationBuilder()
            .method(HttpMethod.DELETE)
            .path(module)
            .param("ids", [str(i) for i in record_ids])
            .param("wf_trigger", wf_trigger)
            .timeout(timeout)
            .build()
        )
        return self._execute(operation, _action_results)
