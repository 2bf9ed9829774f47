from flask import Blueprint, current_app, jsonify
import logging

from feedback_digest.workers.workflow import STATUS_COMPLETED, STATUS_SKIPPED

logger = logging.getLogger(__name__)

digest_bp = Blueprint('digest', __name__)

def _services():
    return current_app.extensions['digest']

@digest_bp.route('/run-digest', methods=['GET', 'POST'])
def run_digest():
    """Run the digest workflow synchronously and return the digest."""
    try:
        result = _services().workflow.run(trigger='request')
    except Exception as e:
        logger.error(f"Failed to run digest: {e}")
        return jsonify({'error': 'Failed to run digest'}), 500

    if result.status == STATUS_SKIPPED:
        return jsonify({'error': result.reason}), 400

    if result.status != STATUS_COMPLETED:
        return jsonify({
            'error': 'Digest run failed',
            'instanceId': result.run_id,
            'step': result.failed_step,
            'details': result.error
        }), 502

    return jsonify(result.digest)

@digest_bp.route('/latest-digest', methods=['GET'])
def latest_digest():
    """Get the most recently stored digest."""
    try:
        digest = _services().store.latest_digest_view()
    except Exception as e:
        logger.error(f"Failed to get latest digest: {e}")
        return jsonify({'error': 'Failed to retrieve digest'}), 500

    if digest is None:
        return jsonify({'error': 'No digests found'}), 404

    return jsonify(digest)

@digest_bp.route('/trigger-workflow', methods=['GET', 'POST'])
def trigger_workflow():
    """Queue a digest workflow run for the background worker."""
    try:
        run_id = _services().run_worker.enqueue(trigger='manual')
    except Exception as e:
        logger.error(f"Failed to trigger digest workflow: {e}")
        return jsonify({'error': 'Failed to start workflow'}), 500

    return jsonify({
        'message': 'Workflow started',
        'instanceId': run_id
    }), 202

@digest_bp.route('/workflow/<instance_id>', methods=['GET'])
def workflow_status(instance_id):
    """Get the status of a workflow run."""
    try:
        status = _services().workflow.get_status(instance_id)
    except Exception as e:
        logger.error(f"Failed to get workflow {instance_id}: {e}")
        return jsonify({'error': 'Failed to retrieve workflow status'}), 500

    if status is None:
        return jsonify({'error': 'Workflow not found'}), 404

    return jsonify(status)
