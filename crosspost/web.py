"""
web.py
Cross-posting HTTP routes: publish, retry, stats, clipboard, subscription
"""

import logging

from flask import Blueprint, Flask, request, jsonify
from flask_login import LoginManager, UserMixin, login_required, current_user

from .config import Settings
from .database.base import SellerStore
from .exceptions import NotFoundError, StoreError, ValidationError
from .publisher import CrossPostingEngine
from .schema.item import Platform, Seller

logger = logging.getLogger(__name__)

# Create blueprint
publish_bp = Blueprint('publish', __name__)

# engine will be set by init_routes() in create_app()
engine = None


def init_routes(cross_posting_engine: CrossPostingEngine):
    """Initialize routes with the engine"""
    global engine
    engine = cross_posting_engine


# ============================================================================
# USER MODEL FOR FLASK-LOGIN
# ============================================================================

class SellerUser(UserMixin):
    """Logged-in seller"""

    def __init__(self, seller: Seller):
        self.id = seller.id
        self.store_name = seller.store_name


# ============================================================================
# PUBLISH
# ============================================================================

@publish_bp.route("/items/<int:item_id>/publish", methods=["POST"])
@login_required
def publish_item(item_id):
    """Publish an item to the requested platforms"""
    seller_id = current_user.get_id()
    try:
        data = request.get_json(silent=True) or {}
        platforms = data.get('platforms') or [Platform.VINTAGE_CRIB.value]
        if not isinstance(platforms, list):
            return jsonify({"error": "platforms must be a list"}), 400

        result = engine.publish_to_all(item_id, seller_id, platforms)

        if result.denied_platforms and not result.per_platform_results:
            tier = engine.gate.get_tier(seller_id)
            return jsonify({
                "error": f"Your {tier.name} plan does not include: "
                         f"{', '.join(sorted(p.value for p in result.denied_platforms))}",
                "deniedPlatforms": sorted(p.value for p in result.denied_platforms),
                "allowedPlatforms": [p.value for p in Platform if tier.allows(p)],
                "tier": tier.key,
                "tierName": tier.name,
                "upgradeRecommendations": engine.gate.upgrade_recommendations(tier.key),
            }), 403

        return jsonify(result.to_dict())

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.exception(f"Publish failed for item {item_id}")
        return jsonify({"error": str(e)}), 500


@publish_bp.route("/items/retry-failed", methods=["POST"])
@login_required
def retry_failed():
    """Retry every failed platform publish for the current seller"""
    try:
        data = request.get_json(silent=True) or {}
        results = engine.retry_failed(current_user.get_id(), data.get('platform'))
        return jsonify({"results": [r.to_dict() for r in results]})

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.exception("Retry of failed cross-posts failed")
        return jsonify({"error": str(e)}), 500


# ============================================================================
# STATS & CLIPBOARD
# ============================================================================

@publish_bp.route("/items/cross-post-stats", methods=["GET"])
@login_required
def cross_post_stats():
    try:
        return jsonify(engine.get_cross_post_stats(current_user.get_id()))
    except Exception as e:
        logger.exception("Failed to get cross-post stats")
        return jsonify({"error": str(e)}), 500


@publish_bp.route("/items/<int:item_id>/clipboard/<platform>", methods=["GET"])
@login_required
def clipboard(item_id, platform):
    """Copy-paste package for posting an item by hand"""
    try:
        package = engine.prepare_clipboard(item_id, current_user.get_id(), platform)
        return jsonify({"success": True, **package.to_dict()})

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.exception(f"Clipboard preparation failed for item {item_id}")
        return jsonify({"error": str(e)}), 500


# ============================================================================
# SUBSCRIPTION
# ============================================================================

@publish_bp.route("/subscription", methods=["GET"])
@login_required
def subscription_status():
    """Current tier, item usage and upgrade options"""
    seller_id = current_user.get_id()
    try:
        gate = engine.gate
        subscription = gate.get_subscription(seller_id)
        tier = gate.get_tier_details(subscription.tier)
        item_count = engine.items.count_items(seller_id)

        return jsonify({
            "subscription": subscription.to_dict(),
            "tierDetails": tier.to_dict(),
            "itemLimit": gate.check_item_creation(seller_id, item_count).to_dict(),
            "limitWarning": gate.check_limit_warning(seller_id, item_count),
            "upgradeRecommendations": gate.upgrade_recommendations(tier.key),
        })

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.exception("Failed to load subscription")
        return jsonify({"error": str(e)}), 500


# ============================================================================
# APP FACTORY
# ============================================================================

def create_app(cross_posting_engine: CrossPostingEngine, seller_store: SellerStore, settings: Settings = None) -> Flask:
    """
    Build the Flask app.

    Args:
        cross_posting_engine: Engine the routes delegate to
        seller_store: Resolves logged-in sellers
        settings: Application settings (secret key)

    Returns:
        Configured Flask app
    """
    settings = settings or Settings()

    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.secret_key

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        """Load the seller for Flask-Login"""
        try:
            return SellerUser(seller_store.get_seller(str(user_id)))
        except NotFoundError:
            return None
        except StoreError as e:
            logger.error(f"[USER_LOADER ERROR] Error loading seller (returning None): {e}")
            return None

    init_routes(cross_posting_engine)
    app.register_blueprint(publish_bp)

    return app
