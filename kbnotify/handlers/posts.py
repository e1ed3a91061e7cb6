# kbnotify/handlers/posts.py
"""
'posts' 컬렉션 변경에 반응하는 알림 핸들러.

좋아요/댓글 핸들러는 변경 전(before)과 후(after) 스냅샷을 비교하여 새로 추가된 원소 하나를 찾습니다.
두 스냅샷 사이에 여러 명이 동시에 좋아요나 댓글을 남기면 처음 발견한 하나만 알림 대상이 됩니다.
"""
import logging
from typing import Optional, Dict, Any, List

from marshmallow import ValidationError

from kbnotify.core.context import HandlerContext
from kbnotify.models.post import PostRecord, CommentRecord
from kbnotify.schemas.records import load_post

logger = logging.getLogger(__name__)


def _load_snapshots(post_id: str, before: Optional[Dict[str, Any]], after: Optional[Dict[str, Any]]):
    """before/after 딕셔너리를 PostRecord 쌍으로 변환합니다. 어느 한쪽이라도 읽을 수 없으면 None."""
    if before is None or after is None:
        logger.info(f"변경 전/후 스냅샷이 없어 건너뜁니다 (post: {post_id})")
        return None
    try:
        return load_post(post_id, before), load_post(post_id, after)
    except ValidationError as e:
        logger.warning(f"게시글 문서 형식 오류로 건너뜁니다 (post: {post_id}): {e.messages}")
        return None


def find_new_liker(before: PostRecord, after: PostRecord) -> Optional[str]:
    """after.likes에는 있고 before.likes에는 없는 첫 번째 사용자 ID. likes가 늘지 않았으면 None."""
    if len(after.likes) <= len(before.likes):
        return None
    previous = set(before.likes)
    return next((user_id for user_id in after.likes if user_id not in previous), None)


def find_new_comment(before: PostRecord, after: PostRecord) -> Optional[CommentRecord]:
    """after.comments 중 before.comments에 같은 ID가 없는 첫 번째 댓글. comments가 늘지 않았으면 None."""
    if len(after.comments) <= len(before.comments):
        return None
    previous = {comment.comment_id for comment in before.comments}
    return next((comment for comment in after.comments if comment.comment_id not in previous), None)


def prior_commenter_ids(before: PostRecord, *excluded: str) -> List[str]:
    """이전 댓글 작성자 중 excluded에 해당하지 않는 사용자 ID (중복 제거, 첫 등장 순서)."""
    return [user_id for user_id in before.commenter_ids() if user_id not in excluded]


def handle_post_liked(ctx: HandlerContext, post_id: str, before: Optional[Dict[str, Any]],
                      after: Optional[Dict[str, Any]]) -> None:
    """
    게시글에 새 좋아요가 생기면 게시글 작성자에게 알립니다.
    자기 게시글에 누른 좋아요, 토큰이 없는 작성자는 알림 대상이 아닙니다.
    """
    try:
        snapshots = _load_snapshots(post_id, before, after)
        if snapshots is None:
            return
        before_post, after_post = snapshots

        liker_id = find_new_liker(before_post, after_post)
        if liker_id is None:
            return

        if liker_id == after_post.author_id:
            logger.info(f"자기 게시글 좋아요는 알리지 않습니다 (post: {post_id})")
            return

        author_token = ctx.users.get_token(after_post.author_id)
        if not author_token:
            logger.info(f"게시글 작성자의 FCM 토큰이 없어 좋아요 알림을 건너뜁니다 (author: {after_post.author_id})")
            return

        liker_name = ctx.users.get_display_name(liker_id)
        ctx.notifications.notify_post_liked(author_token, liker_name)

    except Exception as e:
        logger.error(f"좋아요 알림 처리 중 오류 발생 (post: {post_id}): {e}", exc_info=True)


def _commenter_name(ctx: HandlerContext, comment: CommentRecord) -> str:
    """댓글에 저장된 작성자 이름을 우선 사용하고, 없으면 사용자 문서에서 찾습니다."""
    if comment.author_name and comment.author_name.strip():
        return comment.author_name.strip()
    return ctx.users.get_display_name(comment.author_id)


def handle_post_commented(ctx: HandlerContext, post_id: str, before: Optional[Dict[str, Any]],
                          after: Optional[Dict[str, Any]]) -> None:
    """
    게시글에 새 댓글이 달리면 세 갈래로 알림을 보냅니다.

    1. 게시글 작성자 (본인 댓글이 아니고 토큰이 있을 때)
    2. 이전 댓글 작성자들 (작성자/새 댓글 작성자 제외, 멀티캐스트 한 번)
    3. 댓글에서 멘션된 사용자들 (작성자/새 댓글 작성자 제외, 각각 단일 발송)

    각 단계는 독립적으로 발송되며, 한 단계의 발송 실패가 다른 단계를 막지 않습니다.
    """
    try:
        snapshots = _load_snapshots(post_id, before, after)
        if snapshots is None:
            return
        before_post, after_post = snapshots

        comment = find_new_comment(before_post, after_post)
        if comment is None:
            return

        author_id = after_post.author_id
        commenter_id = comment.author_id
        commenter_name = _commenter_name(ctx, comment)

        # 1. 게시글 작성자
        if commenter_id != author_id:
            author_token = ctx.users.get_token(author_id)
            if author_token:
                ctx.notifications.notify_post_commented(author_token, commenter_name, comment.content)
            else:
                logger.info(f"게시글 작성자의 FCM 토큰이 없어 댓글 알림을 건너뜁니다 (author: {author_id})")

        # 2. 이전 댓글 작성자
        prior_ids = prior_commenter_ids(before_post, author_id, commenter_id)
        if prior_ids:
            tokens = ctx.users.resolve_tokens(prior_ids)
            if tokens:
                ctx.notifications.notify_prior_commenters(tokens, commenter_name)

        # 3. 멘션
        for mentioned_id in dict.fromkeys(m.user_id for m in comment.mentions):
            if mentioned_id in (commenter_id, author_id):
                continue
            token = ctx.users.get_token(mentioned_id)
            if not token:
                logger.info(f"멘션된 사용자의 FCM 토큰이 없어 건너뜁니다 (user: {mentioned_id})")
                continue
            ctx.notifications.notify_mention(token, commenter_name, comment.content, post_id)

    except Exception as e:
        logger.error(f"댓글 알림 처리 중 오류 발생 (post: {post_id}): {e}", exc_info=True)


def handle_post_created(ctx: HandlerContext, post_id: str, data: Optional[Dict[str, Any]]) -> None:
    """
    새 게시글이 올라오면 작성자를 제외한 전체 회원에게 멀티캐스트로 알립니다.
    사용자 수가 많아도 페이지 나눔 없이 전체 컬렉션을 한 번에 읽습니다.
    """
    try:
        if data is None:
            return
        try:
            post = load_post(post_id, data)
        except ValidationError as e:
            logger.warning(f"게시글 문서 형식 오류로 건너뜁니다 (post: {post_id}): {e.messages}")
            return

        tokens = ctx.users.broadcast_tokens(exclude_user_id=post.author_id)
        if not tokens:
            logger.info(f"새 게시글 알림을 받을 사용자가 없습니다 (post: {post_id})")
            return

        author_name = (post.author_name or "").strip() or ctx.users.get_display_name(post.author_id)
        ctx.notifications.notify_new_post(tokens, author_name)

    except Exception as e:
        logger.error(f"새 게시글 알림 처리 중 오류 발생 (post: {post_id}): {e}", exc_info=True)
