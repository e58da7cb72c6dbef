import argparse
import logging
import os
import signal
import sys
from modules.scheduler import run_cleanup_job, setup_schedule
from modules.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def configure_logging():
    """로깅 설정 (파일 + 콘솔)"""
    logging.basicConfig(
        level=os.getenv('FEED_LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('feed_cleaner.log'),
            logging.StreamHandler()
        ]
    )


def signal_handler(signum, frame):
    """시그널 핸들러: 프로그램 종료 시 처리"""
    logger.info("프로그램 종료 신호를 받았습니다.")
    sys.exit(0)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="FTP 피드 디렉토리의 오래된 파일을 정리합니다.")
    parser.add_argument('--schedule', action='store_true',
                        help="FEED_SCHEDULE_TIME에 매일 실행 (종료하지 않음)")
    parser.add_argument('--run-now', action='store_true',
                        help="--schedule과 함께 사용 시 시작하자마자 한 번 실행")
    return parser.parse_args(argv)


def run_once():
    """피드 정리를 한 번 실행하고 종료 코드를 반환"""
    result = run_cleanup_job()
    logger.info(result['message'])
    return result['exit_code']


def run_scheduled(run_now=False):
    """스케줄러를 시작하고 종료 신호까지 대기"""
    scheduler = None
    try:
        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        scheduler = setup_schedule(run_immediately=run_now)
        status = scheduler.get_status()
        logger.info(f"다음 실행 시간: {status['next_runs'][0]['next_run']}")

        # 메인 스레드 유지
        while True:
            signal.pause()

    except ConfigurationError as e:
        logger.error(f"설정 오류로 스케줄러를 시작할 수 없습니다: {str(e)}")
        return e.exit_code
    except KeyboardInterrupt:
        logger.info("프로그램이 사용자에 의해 중단되었습니다.")
    finally:
        if scheduler is not None:
            scheduler.stop()
    return 0


def main(argv=None):
    args = parse_args(argv)
    configure_logging()
    logger.info("피드 정리 서비스를 시작합니다.")

    if args.schedule:
        exit_code = run_scheduled(run_now=args.run_now)
    else:
        exit_code = run_once()

    logger.info("피드 정리 서비스를 종료합니다.")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
