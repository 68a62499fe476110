"""
Twitter Service Module

This module handles integration with the X (Twitter) API.
It provides functionality for authenticating with OAuth 1.0a, uploading
images, posting single posts, and posting threads as chained replies.
"""

from typing import Any, List, Optional, Sequence

import requests
import tweepy

from config import settings
from config.credentials import Credentials
from data.models import PostItem, PublishedPost
from utils.exceptions import (
    EmptyTextError, MediaUploadError, RemoteError, ThreadPostError, TooLongError,
    UnsupportedMediaTypeError, ValidationError
)
from utils.helpers import count_characters, media_extension, safe_get
from utils.logger import get_logger

logger = get_logger(__name__)


class TimeoutSession(requests.Session):
    """requests.Session that applies a default timeout to every request."""

    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, **kwargs)


def status_url(post_id: str) -> str:
    """Return the canonical browsable URL for a post."""
    return f"https://{settings.STATUS_HOST}/i/status/{post_id}"


def validate_post_text(text: str, has_media: bool = False) -> int:
    """
    Check a post against the X length rules.

    Args:
        text: The post text
        has_media: Whether images are attached (an image-only post is allowed)

    Returns:
        int: The character count

    Raises:
        EmptyTextError: If there is neither text nor media
        TooLongError: If the text exceeds settings.POST_CHARACTER_LIMIT
    """
    length = count_characters(text)
    if length == 0 and not has_media:
        raise EmptyTextError("Post text cannot be empty")
    if length > settings.POST_CHARACTER_LIMIT:
        raise TooLongError(length, settings.POST_CHARACTER_LIMIT)
    return length


def extract_api_error(status_code: Optional[int], payload: Any) -> str:
    """
    Pull a human-readable message out of an X API error body.

    Known shapes, checked in order:
    - v1.1 ``{"error": "..."}``
    - ``{"errors": [{"detail": "..."} | {"message": "..."}]}``
    - v2 problem ``{"detail": "..."}`` or ``{"title": "..."}``

    Args:
        status_code: HTTP status, if known
        payload: Decoded JSON body, or None

    Returns:
        str: The message
    """
    fallback = f"API error (status {status_code})" if status_code else "API error"
    if not isinstance(payload, dict):
        return fallback

    if isinstance(payload.get("error"), str) and payload["error"]:
        return f"API error: {payload['error']}"

    first = safe_get(payload, "errors", 0)
    if isinstance(first, dict):
        detail = first.get("detail") or first.get("message")
        if detail:
            return f"API error: {detail}"
    elif isinstance(first, str) and first:
        return f"API error: {first}"

    if payload.get("detail"):
        return f"API error: {payload['detail']}"
    if payload.get("title"):
        return f"API error: {payload['title']}"

    return fallback


def _remote_error(e: Exception) -> RemoteError:
    response = getattr(e, "response", None)
    status_code = getattr(response, "status_code", None)
    payload = None
    if response is not None:
        try:
            payload = response.json()
        except ValueError:
            payload = None
    if payload is None and not isinstance(e, tweepy.errors.HTTPException):
        return RemoteError(f"Failed to send request: {e}", status_code)
    return RemoteError(extract_api_error(status_code, payload), status_code)


class TwitterService:
    """Service for X integration."""

    def __init__(
        self,
        credentials: Credentials,
        client: Optional[Any] = None,
        api: Optional[Any] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the X service with OAuth 1.0a user-context authentication.

        Args:
            credentials: The four API tokens
            client: Pre-built tweepy.Client (v2, used for posting)
            api: Pre-built tweepy.API (v1.1, used for media upload)
            timeout: Seconds for every request (defaults to settings.HTTP_TIMEOUT)
        """
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.client = client
        self.api = api

        if self.client is None:
            self.client = tweepy.Client(
                consumer_key=credentials.api_key,
                consumer_secret=credentials.api_secret,
                access_token=credentials.access_token,
                access_token_secret=credentials.access_secret,
            )
            self.client.session = TimeoutSession(self.timeout)

        if self.api is None:
            auth = tweepy.OAuth1UserHandler(
                credentials.api_key,
                credentials.api_secret,
                credentials.access_token,
                credentials.access_secret,
            )
            self.api = tweepy.API(auth, timeout=self.timeout)

    def publish(
        self,
        text: str,
        media_ids: Optional[Sequence[str]] = None,
        reply_to: Optional[str] = None
    ) -> PublishedPost:
        """
        Publish one post.

        Args:
            text: The post text
            media_ids: Uploaded media to attach
            reply_to: ID of the post this one replies to

        Returns:
            PublishedPost: The new post's ID and text

        Raises:
            EmptyTextError, TooLongError: If the text is invalid
            RemoteError: If the API rejects the request
        """
        media_ids = list(media_ids or [])
        validate_post_text(text, has_media=bool(media_ids))

        try:
            response = self.client.create_tweet(
                text=text or None,
                media_ids=media_ids or None,
                in_reply_to_tweet_id=reply_to,
                user_auth=True,
            )
        except (tweepy.errors.TweepyException, requests.RequestException) as e:
            error = _remote_error(e)
            logger.error(f"Error posting: {error}")
            raise error from e

        data = getattr(response, "data", None) or {}
        post_id = data.get("id") if isinstance(data, dict) else None
        if not post_id:
            raise RemoteError("API error: response did not include a post ID")

        logger.info(f"Successfully posted {post_id}" + (f" in reply to {reply_to}" if reply_to else ""))
        return PublishedPost(id=str(post_id), text=data.get("text", text))

    def upload_media(self, path: str) -> str:
        """
        Upload an image and return its media ID.

        Args:
            path: Local image path

        Returns:
            str: The media_id_string

        Raises:
            UnsupportedMediaTypeError: If the file is not an allowed image type
            MediaUploadError: If the file cannot be read or the upload fails
        """
        ext = media_extension(path)
        if ext in settings.VIDEO_EXTENSIONS:
            raise UnsupportedMediaTypeError(ext, "Video upload not supported")
        if ext not in settings.ALLOWED_IMAGE_EXTENSIONS:
            raise UnsupportedMediaTypeError(ext)

        try:
            with open(path, "rb") as f:
                media = self.api.media_upload(filename=path, file=f)
        except OSError as e:
            raise MediaUploadError(f"Failed to read file: {e}") from e
        except (tweepy.errors.TweepyException, requests.RequestException) as e:
            error = _remote_error(e)
            logger.error(f"Failed to upload media: {error}")
            raise MediaUploadError(str(error)) from e

        media_id = getattr(media, "media_id_string", None) or str(getattr(media, "media_id", ""))
        if not media_id:
            raise MediaUploadError("Upload response did not include a media ID")

        logger.info(f"Uploaded media {media_id}")
        return media_id

    def publish_thread(
        self,
        items: Sequence[PostItem],
        reply_to: Optional[str] = None
    ) -> List[PublishedPost]:
        """
        Publish posts in order, each as a reply to the one before.

        Already-published posts are never retried or deleted. If a post fails,
        the error carries everything published so far.

        Args:
            items: The posts, in thread order
            reply_to: Post the first item replies to (continues an earlier thread)

        Returns:
            List[PublishedPost]: One record per item

        Raises:
            ValidationError: If the thread is empty
            ThreadPostError: If any item fails
        """
        if not items:
            raise ValidationError("Thread cannot be empty")

        published: List[PublishedPost] = []
        for i, item in enumerate(items):
            try:
                post = self.publish(item.text, item.media_ids, reply_to=reply_to)
            except (ValidationError, RemoteError) as e:
                logger.error(f"Thread stopped at item {i + 1} of {len(items)}: {e}")
                raise ThreadPostError(i + 1, published, e) from e
            published.append(post)
            reply_to = post.id

        logger.info(f"Posted thread of {len(published)} posts")
        return published
