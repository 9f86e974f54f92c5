#!/usr/bin/env python3
"""
Tubely video ingestion - Main Entry Point
"""

import sys
import argparse
import subprocess
from pathlib import Path

from config import settings
from utils.errors import IngestError
from utils.logger import setup_logger

logger = setup_logger("main")


def check_dependencies():
    """Check that ffmpeg and ffprobe are available"""
    errors = []

    for binary in (settings.FFMPEG_BINARY, settings.FFPROBE_BINARY):
        try:
            result = subprocess.run([binary, '-version'], capture_output=True)
            if result.returncode != 0:
                errors.append(f"{binary} not found or not working")
        except FileNotFoundError:
            errors.append(
                f"{binary} not installed. Install with: sudo apt install ffmpeg (Linux) "
                f"or brew install ffmpeg (Mac)"
            )

    if settings.STORAGE_BACKEND == "s3" and not settings.S3_BUCKET:
        errors.append("STORAGE_BACKEND=s3 but S3_BUCKET not set in .env file")

    if settings.JWT_SECRET == "dev-insecure-secret":
        logger.warning("JWT_SECRET is the development default")

    if errors:
        logger.error("Dependency check failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return False

    logger.info("✓ All dependencies OK")
    return True


def probe_video(video_path: str):
    """Print the aspect ratio and orientation of a local file"""
    from media.aspect_classifier import AspectClassifier, Orientation

    aspect_ratio = AspectClassifier().aspect_ratio(video_path)
    orientation = Orientation.from_aspect_ratio(aspect_ratio)
    logger.info(f"{Path(video_path).name}: aspect ratio {aspect_ratio} ({orientation.value})")


def optimize_video(input_path: str, output_path: str):
    """Remux a local file for fast start"""
    from media.ffmpeg_processor import StreamOptimizer

    output = StreamOptimizer().optimize(input_path, output_path)
    logger.info(f"✓ Fast-start file written to {output}")


def create_video(user_id: str, title: str, description: str = None):
    """Create a draft video record"""
    from utils.database import Database

    record = Database().create_video(user_id, title, description)
    if not record:
        logger.error("Failed to create video")
        return False

    logger.info(f"Created video: {record['id']}")
    return True


def ingest_video(video_id: str, video_path: str, user_id: str):
    """Run a local file through the full ingestion pipeline"""
    from api.services.container import build_container
    from orchestration.ingestion import UploadRequest

    video_file = Path(video_path)
    if not video_file.exists():
        logger.error(f"Video file not found: {video_path}")
        return False

    logger.info("=" * 60)
    logger.info("VIDEO INGESTION")
    logger.info("=" * 60)
    logger.info(f"Input video: {video_file.name}")
    logger.info(f"File size: {video_file.stat().st_size / (1024*1024):.2f} MB")

    container = build_container()
    with open(video_file, 'rb') as stream:
        record = container.orchestrator.ingest(UploadRequest(
            stream=stream,
            content_type="video/mp4",
            video_id=video_id,
            user_id=user_id,
            size=video_file.stat().st_size,
            filename=video_file.name
        ))

    logger.info("✓ INGESTION COMPLETE")
    logger.info(f"Storage key: {record['video_key']}")
    print(container.store.sign(record["video_key"]))
    return True


def list_videos(user_id: str):
    """List a user's videos"""
    from utils.database import Database

    videos = Database().list_videos(user_id)

    if not videos:
        logger.info("No videos found")
        return

    logger.info(f"\nFound {len(videos)} video(s):\n")
    logger.info(f"{'ID':<38} {'Title':<30} {'Video key':<70}")
    logger.info("-" * 140)

    for video in videos:
        logger.info(
            f"{video['id']:<38} "
            f"{video['title'][:30]:<30} "
            f"{video['video_key'] or '-':<70}"
        )


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Tubely video ingestion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the API server
  python main.py serve

  # Mint a bearer token for a user
  python main.py token --user-id <user-id>

  # Create a video and ingest a local file into it
  python main.py create --user-id <user-id> --title "Boots"
  python main.py ingest <video-id> boots.mp4 --user-id <user-id>
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Run the API server')
    serve_parser.add_argument('--host', default=settings.HOST, help='Bind address')
    serve_parser.add_argument('--port', type=int, default=settings.PORT, help='Port')
    serve_parser.add_argument('--reload', action='store_true', help='Reload on code changes')

    # Check command
    subparsers.add_parser('check', help='Check ffmpeg/ffprobe and storage configuration')

    # Probe command
    probe_parser = subparsers.add_parser('probe', help='Classify a video file by aspect ratio')
    probe_parser.add_argument('video', help='Path to video file')

    # Optimize command
    optimize_parser = subparsers.add_parser('optimize', help='Remux a video for fast start')
    optimize_parser.add_argument('input', help='Input video')
    optimize_parser.add_argument('output', help='Output path')

    # Token command
    token_parser = subparsers.add_parser('token', help='Create an access token')
    token_parser.add_argument('--user-id', required=True, help='User ID')

    # Create command
    create_parser = subparsers.add_parser('create', help='Create a draft video record')
    create_parser.add_argument('--user-id', required=True, help='User ID')
    create_parser.add_argument('--title', required=True, help='Video title')
    create_parser.add_argument('--description', help='Video description')

    # Ingest command
    ingest_parser = subparsers.add_parser('ingest', help='Ingest a local video file')
    ingest_parser.add_argument('video_id', help='Video ID')
    ingest_parser.add_argument('video', help='Path to video file')
    ingest_parser.add_argument('--user-id', required=True, help='Owner user ID')

    # List command
    list_parser = subparsers.add_parser('list', help='List videos')
    list_parser.add_argument('--user-id', required=True, help='User ID')

    # Sign command
    sign_parser = subparsers.add_parser('sign', help='Print a signed URL for a storage key')
    sign_parser.add_argument('key', help='Storage key')
    sign_parser.add_argument('--ttl', type=int, default=settings.SIGNED_URL_TTL_SECONDS,
                             help='Lifetime in seconds')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    # Check dependencies for commands that shell out
    if args.command in ('probe', 'optimize', 'ingest'):
        if not check_dependencies():
            return 1

    # Execute command
    try:
        if args.command == 'serve':
            import uvicorn
            uvicorn.run("api.main:app", host=args.host, port=args.port,
                        reload=args.reload, log_level="info")
            return 0

        elif args.command == 'check':
            return 0 if check_dependencies() else 1

        elif args.command == 'probe':
            probe_video(args.video)
            return 0

        elif args.command == 'optimize':
            optimize_video(args.input, args.output)
            return 0

        elif args.command == 'token':
            from utils.auth import create_access_token
            print(create_access_token(args.user_id))
            return 0

        elif args.command == 'create':
            return 0 if create_video(args.user_id, args.title, args.description) else 1

        elif args.command == 'ingest':
            return 0 if ingest_video(args.video_id, args.video, args.user_id) else 1

        elif args.command == 'list':
            list_videos(args.user_id)
            return 0

        elif args.command == 'sign':
            from storage.object_store import build_object_store
            print(build_object_store().sign(args.key, args.ttl))
            return 0

    except IngestError as e:
        logger.error(f"{type(e).__name__}: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.info("\nOperation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
