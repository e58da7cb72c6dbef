# modules/scheduler.py
import schedule
import time
import logging
import threading
from datetime import datetime
import pytz
from configs.feed_setting import get_settings
from configs.telegram_setting import is_notification_enabled
from modules.exceptions import ConfigurationError, FeedCleanerError
from modules.feed_cleaner import FeedCleaner
from modules.telegram_sender import TelegramSender
from utils.report_formatter import ReportFormatter

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_EXIT_CODE = 4


class SchedulerThread(threading.Thread):
    def __init__(self, run_time="03:00", timezone="UTC", run_immediately=False, poll_interval=60):
        super().__init__(daemon=True)
        self.is_running = False
        self.run_time = run_time  # 피드 정리 실행 시간 (HH:MM)
        self.timezone = timezone
        self.run_immediately = run_immediately
        self.poll_interval = poll_interval
        self.scheduler = schedule.Scheduler()
        self.register()

    def register(self):
        """피드 정리 스케줄 등록"""
        self.scheduler.every().day.at(self.run_time, self.timezone).do(run_cleanup_job)
        logger.info(f"피드 정리 스케줄 등록: 매일 {self.run_time} ({self.timezone})")

    def run(self):
        self.is_running = True
        logger.info("스케줄러 시작됨")

        # 옵션이 설정된 경우에만 즉시 실행
        if self.run_immediately:
            logger.info("초기 피드 정리 실행")
            run_cleanup_job()

        while self.is_running:
            self.scheduler.run_pending()
            time.sleep(self.poll_interval)

    def stop(self):
        self.is_running = False

    def get_status(self):
        """스케줄러 상태 조회"""
        return {
            "next_runs": [
                {
                    "job": job.job_func.__name__,
                    "next_run": str(job.next_run)
                }
                for job in self.scheduler.get_jobs()
            ]
        }


def notify(text):
    """알림이 활성화된 경우 텔레그램으로 전송 (실패해도 작업 결과에는 영향 없음)"""
    try:
        if not is_notification_enabled():
            return False
        sender = TelegramSender()
    except ConfigurationError as e:
        logger.error(f"알림 설정 오류로 전송을 건너뜁니다: {str(e)}")
        return False

    try:
        return sender.send_message(text)
    finally:
        sender.close()


def run_cleanup_job():
    """피드 정리 작업 실행"""
    formatter = ReportFormatter()
    directory = None
    try:
        settings = get_settings()
        directory = settings.directory
        timezone = pytz.timezone(settings.schedule_timezone)
        current_datetime = datetime.now(timezone)
        logger.info(
            f"피드 정리 프로세스 시작: {current_datetime.strftime('%Y-%m-%d %H:%M')} "
            f"({settings.schedule_timezone})"
        )

        cleaner = FeedCleaner.from_settings(settings)
        report = cleaner.run()

        notify(formatter.format_report(report))
        return {
            "status": "success",
            "message": f"피드 정리 완료 (삭제 {len(report.deleted)}개, 실패 {len(report.failed)}개)",
            "exit_code": 0,
            "report": report,
        }

    except FeedCleanerError as e:
        error_msg = f"피드 정리 중단 ({type(e).__name__}): {str(e)}"
        logger.error(error_msg, exc_info=True)
        if not isinstance(e, ConfigurationError):
            notify(formatter.format_failure(directory, e))
        return {"status": "error", "message": error_msg, "exit_code": e.exit_code}

    except Exception as e:
        error_msg = f"피드 정리 중 예기치 않은 오류 발생: {str(e)}"
        logger.error(error_msg, exc_info=True)
        return {"status": "error", "message": error_msg, "exit_code": UNEXPECTED_ERROR_EXIT_CODE}


def setup_schedule(run_immediately=False):
    """스케줄러 설정 및 시작"""
    settings = get_settings()
    scheduler_thread = SchedulerThread(
        run_time=settings.schedule_time,
        timezone=settings.schedule_timezone,
        run_immediately=run_immediately,
    )
    scheduler_thread.start()
    return scheduler_thread
