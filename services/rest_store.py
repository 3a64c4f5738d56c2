"""
REST Store - Remote store over the hosted backend's PostgREST interface.

Talks to <base_url>/rest/v1/<table> with the project API key. Change events
are published to the local ChangeFeed for writes made through this store;
events from other processes need a realtime transport and are not delivered.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

import requests

from services.change_feed import DELETE, INSERT, UPDATE
from services.remote_store import RemoteStore, RemoteStoreError

logger = logging.getLogger(__name__)


def _encode_value(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _condition(column, value):
    if value is None:
        return f"{column}.is.null"
    return f"{column}.eq.{_encode_value(value)}"


def _serialize(values: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, (datetime, date)) else value
        for key, value in values.items()
    }


class RestStore(RemoteStore):
    """PostgREST-backed remote store using a requests session."""

    def __init__(self, base_url: str, api_key: str, feed=None, origin=None,
                 timeout: int = 15, access_token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        super().__init__(feed=feed, origin=origin)
        if not base_url:
            raise ValueError("base_url is required for the REST store")
        self.rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.http = session or requests.Session()
        self.http.headers.update({
            'apikey': api_key,
            'Authorization': f"Bearer {access_token or api_key}",
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

    def select(self, table, filters=None, any_of=None, order_by=None, descending=False,
               limit=None, offset=None):
        params = self._params(filters, any_of)
        params['select'] = '*'
        if order_by:
            params['order'] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params['limit'] = limit
        if offset:
            params['offset'] = offset
        response = self._request('GET', table, params=params)
        return response.json()

    def count(self, table, filters=None, any_of=None):
        params = self._params(filters, any_of)
        params['select'] = 'id'
        response = self._request('HEAD', table, params=params, prefer='count=exact')
        content_range = response.headers.get('Content-Range', '')
        total = content_range.rsplit('/', 1)[-1] if '/' in content_range else ''
        try:
            return int(total)
        except ValueError:
            raise RemoteStoreError(
                f"Missing row count in response for {table}: {content_range!r}", code='count_unavailable'
            )

    def insert(self, table, values):
        response = self._request('POST', table, json=_serialize(values), prefer='return=representation')
        rows = response.json()
        if not rows:
            raise RemoteStoreError(f"Insert into {table} returned no row", code='PGRST116')
        created = rows[0]
        self._publish(table, INSERT, new=created)
        return created

    def update(self, table, row_id, values):
        response = self._request(
            'PATCH', table,
            params={'id': f"eq.{row_id}"},
            json=_serialize(values),
            prefer='return=representation'
        )
        rows = response.json()
        if not rows:
            logger.debug(f"Update on {table} matched no row for id {row_id}")
            return None
        updated = rows[0]
        self._publish(table, UPDATE, new=updated)
        return updated

    def delete(self, table, row_id):
        response = self._request(
            'DELETE', table,
            params={'id': f"eq.{row_id}"},
            prefer='return=representation'
        )
        rows = response.json() if response.content else []
        if rows:
            self._publish(table, DELETE, old=rows[0])

    def _params(self, filters, any_of):
        params = {}
        for column, value in (filters or {}).items():
            params[column] = 'is.null' if value is None else f"eq.{_encode_value(value)}"
        if any_of:
            params['or'] = '(' + ','.join(_condition(c, v) for c, v in any_of.items()) + ')'
        return params

    def _request(self, method, table, params=None, json=None, prefer=None):
        headers = {'Prefer': prefer} if prefer else {}
        url = f"{self.rest_url}/{table}"
        try:
            response = self.http.request(
                method, url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {table} failed: {e}")
            raise RemoteStoreError(f"Request to {table} failed: {e}", code='network_error')

        if not response.ok:
            error = self._error_from(response)
            logger.error(f"{method} {table} returned {response.status_code}: {error.message}")
            raise error
        return response

    def _error_from(self, response):
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        message = payload.get('message') or response.text or response.reason or 'Request failed'
        code = payload.get('code') or str(response.status_code)
        return RemoteStoreError(message, code=code)
