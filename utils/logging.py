import logging
import logging.handlers
import os
import json
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any
from fastapi import Request

from utils.config import AppConfig


class AppLogger:
    """Request, model-call and error logging with a rotating log file"""

    def __init__(self,
                 log_file: str = "logs/app.log",
                 max_file_size: int = 10 * 1024 * 1024,  # 10MB
                 backup_count: int = 5,
                 log_level: str = "INFO"):

        self.log_file = log_file
        self.max_file_size = max_file_size
        self.backup_count = backup_count

        log_dir = Path(log_file).parent
        log_dir.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger("study_assistant")
        self.logger.setLevel(getattr(logging, log_level.upper()))

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        console_handler = logging.StreamHandler()

        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)-20s | %(funcName)-15s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

        self.request_stats = {
            "total_requests": 0,
            "failed_requests": 0,
            "rate_limited_requests": 0,
            "ai_requests": 0,
            "ai_time_ms": 0.0,
            "start_time": time.time()
        }

        self.logger.info("🚀 Logging system initialized")
        self.logger.info(f"📁 Log file: {log_file}")

    def log_request_start(self, request: Request, endpoint: str):
        """Log the start of a request with details"""
        client_ip = request.client.host if request.client else "unknown"
        user_agent = request.headers.get("user-agent", "unknown")

        request_info = {
            "endpoint": endpoint,
            "method": request.method,
            "client_ip": client_ip,
            "user_agent": user_agent[:100],
            "timestamp": datetime.now().isoformat()
        }

        self.logger.info(f"🔵 REQUEST START | {endpoint} | IP: {client_ip}")
        return request_info

    def log_request_end(self, request_info: Dict[str, Any], duration_ms: float, status_code: int = 200):
        """Log the end of a request with timing"""
        endpoint = request_info["endpoint"]

        self.request_stats["total_requests"] += 1
        if status_code == 429:
            self.request_stats["rate_limited_requests"] += 1
        elif status_code >= 400:
            self.request_stats["failed_requests"] += 1

        status_emoji = "✅" if status_code < 400 else "⏳" if status_code == 429 else "❌"

        self.logger.info(
            f"{status_emoji} REQUEST END | {endpoint} | IP: {request_info['client_ip']} | "
            f"Duration: {duration_ms:.2f}ms | Status: {status_code}"
        )

    def log_ai_request(self, agent_type: str, topic: str, duration_ms: float, success: bool = True):
        """Log a call to the model service"""
        self.request_stats["ai_requests"] += 1
        self.request_stats["ai_time_ms"] += duration_ms

        outcome = "ok" if success else "failed"
        self.logger.info(
            f"🤖 AI REQUEST | {agent_type} | Topic: {topic[:50]} | Duration: {duration_ms:.2f}ms | {outcome}"
        )

    def log_rate_limited(self, endpoint: str, retry_after_ms: int):
        self.logger.warning(f"⏳ RATE LIMITED | {endpoint} | Retry after: {retry_after_ms}ms")

    def log_error(self, error: Exception, endpoint: str, extra_context: Dict = None):
        """Log errors with context"""
        context = f" | Context: {json.dumps(extra_context, default=str)}" if extra_context else ""

        self.logger.error(
            f"💥 ERROR | {endpoint} | {type(error).__name__}: {str(error)}{context}",
            exc_info=True
        )

    def get_request_stats(self) -> Dict[str, Any]:
        """Get current request statistics"""
        uptime_hours = (time.time() - self.request_stats["start_time"]) / 3600
        total_requests = self.request_stats["total_requests"]
        ai_requests = max(self.request_stats["ai_requests"], 1)

        return {
            "total_requests": total_requests,
            "failed_requests": self.request_stats["failed_requests"],
            "rate_limited_requests": self.request_stats["rate_limited_requests"],
            "ai_requests": self.request_stats["ai_requests"],
            "avg_ai_duration_ms": round(self.request_stats["ai_time_ms"] / ai_requests, 2),
            "requests_per_hour": round(total_requests / max(uptime_hours, 0.01), 2),
            "uptime_hours": round(uptime_hours, 2),
            "log_file": self.log_file,
            "log_file_size_mb": round(os.path.getsize(self.log_file) / (1024*1024), 2) if os.path.exists(self.log_file) else 0
        }

    def log_periodic_stats(self):
        """Log periodic request statistics"""
        stats = self.get_request_stats()

        self.logger.info(
            f"📊 PERIODIC STATS | Requests: {stats['total_requests']} | "
            f"Failed: {stats['failed_requests']} | "
            f"Rate limited: {stats['rate_limited_requests']} | "
            f"AI Requests: {stats['ai_requests']} | "
            f"Avg AI: {stats['avg_ai_duration_ms']}ms | "
            f"Uptime: {stats['uptime_hours']}h"
        )


# Global logger instance
app_logger = AppLogger(log_file=AppConfig.LOG_FILE, log_level=AppConfig.LOG_LEVEL)


# Convenience functions for easy usage
def log_request_start(request: Request, endpoint: str):
    return app_logger.log_request_start(request, endpoint)

def log_request_end(request_info: Dict[str, Any], duration_ms: float, status_code: int = 200):
    app_logger.log_request_end(request_info, duration_ms, status_code)

def log_ai_request(agent_type: str, topic: str, duration_ms: float, success: bool = True):
    app_logger.log_ai_request(agent_type, topic, duration_ms, success)

def log_rate_limited(endpoint: str, retry_after_ms: int):
    app_logger.log_rate_limited(endpoint, retry_after_ms)

def log_error(error: Exception, endpoint: str, extra_context: Optional[Dict] = None):
    app_logger.log_error(error, endpoint, extra_context)

def get_request_stats():
    return app_logger.get_request_stats()

def log_periodic_stats():
    app_logger.log_periodic_stats()
