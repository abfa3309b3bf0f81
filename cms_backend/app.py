from typing import Any, Dict, Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from . import command_handlers
from .di import Container, build_container
from .errors import CmsError
from .events import EventKind
from .logger import configure_logging
from .payments import get_payment_processor
from .pipeline import PipelineRequest
from .post_views import enrich_post
from .roles import Role
from .security import require_auth
from .sorting import SortOrder, sort_posts


def _payload() -> Dict[str, Any]:
    """JSON body, or form fields for multipart/form-encoded requests."""
    data = request.get_json(force=True, silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict() if request.form else {}


def _error(e: CmsError):
    return jsonify(message=e.message), e.status_code


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app around a container (a default one is wired from the environment)."""
    container = container or build_container()
    app = Flask(__name__)
    app.extensions['cms'] = container
    CORS(app, origins=container.cfg.CORS_ORIGINS, supports_credentials=True)

    logger = container.logger
    repo = container.repo
    bus = container.bus
    auth = container.authenticator
    facade = container.content

    @app.before_request
    def run_request_pipeline():
        pipeline_request = PipelineRequest(
            method=request.method,
            path=request.path,
            body=_payload() if request.method in ('POST', 'PUT') else {},
            headers=dict(request.headers),
        )
        response = container.pipeline.run(pipeline_request)
        g.request_marks = pipeline_request.marks
        if response is not None:
            return jsonify(response.body), response.status
        return None

    # --- authentication ---

    @app.route('/api/auth/register', methods=['POST'])
    def register():
        payload = _payload()
        try:
            user, token = command_handlers.handle_register_user(
                repo, auth, bus, payload.get('username'), payload.get('email'),
                payload.get('password'), role=payload.get('role'))
            logger.info(f'New user registered: {user.username}')
            return jsonify(token=token, user=user.summary()), 201
        except CmsError as e:
            return _error(e)
        except Exception as e:
            logger.error(f'Registration error: {e}')
            return jsonify(message=str(e)), 500

    @app.route('/api/auth/login', methods=['POST'])
    def login():
        payload = _payload()
        try:
            user, token = command_handlers.handle_login(repo, auth, bus, payload.get('email'), payload.get('password'))
            logger.info(f'User logged in: {user.username}')
            return jsonify(token=token, user=user.summary())
        except CmsError as e:
            return _error(e)
        except Exception as e:
            logger.error(f'Login error: {e}')
            return jsonify(message=str(e)), 500

    @app.route('/api/auth/logout', methods=['POST'])
    @require_auth()
    def logout():
        try:
            command_handlers.handle_logout(auth, g.user)
            logger.info(f'User logged out: {g.user.username}')
            return jsonify(message='Logged out successfully')
        except Exception as e:
            logger.error(f'Logout error: {e}')
            return jsonify(message=str(e)), 500

    @app.route('/api/auth/profile', methods=['GET'])
    @require_auth()
    def profile():
        user = repo.get_user(g.user.user_id)
        if user is None:
            return jsonify(message='User not found'), 404
        data = user.to_dict()
        data['permissions'] = list(Role.parse(user.role).permissions)
        return jsonify(user=data)

    # --- users ---

    @app.route('/api/users', methods=['GET'])
    @require_auth(Role.ADMIN)
    def list_users():
        try:
            return jsonify([u.to_dict() for u in repo.list_users()])
        except Exception as e:
            return jsonify(message=str(e)), 500

    # --- posts ---

    @app.route('/api/posts', methods=['GET'])
    def list_posts():
        try:
            order = SortOrder.parse(request.args.get('sortBy'))
            logger.info(f'Using {order.value} sort strategy')
            posts = sort_posts(repo.list_posts(), order)
            return jsonify([p.to_dict() for p in posts])
        except Exception as e:
            return jsonify(message=str(e)), 500

    @app.route('/api/posts/<int:post_id>', methods=['GET'])
    def get_post(post_id: int):
        try:
            post = facade.get_post(post_id)
            return jsonify(enrich_post(post.to_dict(), logger))
        except CmsError as e:
            return _error(e)
        except Exception as e:
            return jsonify(message=str(e)), 500

    @app.route('/api/posts', methods=['POST'])
    @require_auth(Role.ADMIN, Role.EDITOR)
    def create_post():
        payload = _payload()
        try:
            post = command_handlers.handle_create_post(
                facade, bus, g.user, payload.get('title'), payload.get('content'), payload.get('category'))
            logger.info(f'Post created: {post.title}')
            return jsonify(post.to_dict()), 201
        except CmsError as e:
            if e.status_code >= 500:
                logger.error(e.message)
            return _error(e)
        except Exception as e:
            logger.error(str(e))
            return jsonify(message=str(e)), 500

    @app.route('/api/posts/<int:post_id>', methods=['PUT'])
    @require_auth(Role.ADMIN, Role.EDITOR)
    def update_post(post_id: int):
        try:
            post = command_handlers.handle_update_post(repo, bus, g.user, post_id, _payload())
            return jsonify(post.to_dict())
        except CmsError as e:
            return _error(e)
        except Exception as e:
            return jsonify(message=str(e)), 500

    @app.route('/api/posts/<int:post_id>', methods=['DELETE'])
    @require_auth(Role.ADMIN, Role.EDITOR)
    def delete_post(post_id: int):
        try:
            command_handlers.handle_delete_post(repo, bus, g.user, post_id)
            return jsonify(message='Post deleted successfully')
        except CmsError as e:
            return _error(e)
        except Exception as e:
            return jsonify(message=str(e)), 500

    @app.route('/api/posts/<int:post_id>/publish', methods=['PUT'])
    @require_auth(Role.ADMIN)
    def publish_post(post_id: int):
        try:
            post = command_handlers.handle_publish_post(facade, bus, g.user, post_id)
            logger.info(f'Post published: {post.title}')
            return jsonify(post.to_dict())
        except CmsError as e:
            return _error(e)
        except Exception as e:
            return jsonify(message=str(e)), 500

    # --- payments ---

    @app.route('/api/payments/demo', methods=['POST'])
    @require_auth()
    def payment_demo():
        payload = _payload()
        try:
            processor = get_payment_processor(payload.get('provider'))
            logger.info(f'Using {processor.name} adapter for payment')
            result = processor.pay(payload.get('amount') or 10, payload.get('currency') or 'USD')
            return jsonify(success=True, result=result)
        except Exception as e:
            logger.error(f'Payment demo error: {e}')
            return jsonify(message=str(e)), 500

    # --- activity feed ---

    @app.route('/api/activity', methods=['GET'])
    @require_auth()
    def activity():
        try:
            records = repo.find_activities(limit=container.cfg.ACTIVITY_FEED_LIMIT)
            return jsonify(activities=[r.to_dict() for r in records])
        except Exception as e:
            return jsonify(message=str(e)), 500

    # --- system ---

    @app.route('/api/health', methods=['GET'])
    def health():
        return jsonify(status='OK', message='CMS API is running', components={
            'logger': 'active',
            'roles': 'active',
            'sorting': 'active',
            'events': f'{sum(len(bus.subscribers(k)) for k in EventKind)} subscriptions',
            'post_views': 'active',
            'payments': 'active',
            'content': 'active',
        })

    @app.route('/api/logs', methods=['GET'])
    @require_auth(Role.ADMIN)
    def logs():
        return jsonify(logs=logger.entries())

    @app.errorhandler(404)
    def not_found(e):
        return jsonify(message='Route not found'), 404

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return jsonify(message=e.description), e.code
        logger.exception(str(e))
        return jsonify(message='Something went wrong!'), 500

    return app


def main() -> None:
    application = create_app()
    cfg = application.extensions['cms'].cfg
    configure_logging(cfg.LOG_LEVEL)
    application.run(debug=True, port=cfg.PORT)


if __name__ == '__main__':
    main()
