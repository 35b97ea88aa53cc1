"""
Localized user-facing messages
"""

from gamehouse.config import get_settings

MESSAGES = {
    "en": {
        # generic
        "internal_error": "An unexpected error occurred",
        "unauthorized": "Unauthorized",
        "forbidden": "Access denied - admin only",
        "validation_failed": "Invalid request data",
        "not_found": "Resource not found",
        "conflict": "Resource already exists",
        "invalid_state": "Operation not allowed in the current state",
        "no_update_data": "No valid update data provided",
        "invalid_id": "Invalid ID format",
        # auth
        "credentials_required": "Username and password are required",
        "invalid_credentials": "Invalid username or password",
        "login_success": "Login successful",
        "logout_success": "Logout successful",
        "login_failed": "Login failed",
        "session_expired": "Session not found or expired",
        "email_required": "Email is required",
        "email_invalid": "Invalid email format",
        "reset_link_sent": "If the email exists in the system, a reset link will be sent",
        "reset_fields_required": "Token and password are required",
        "password_too_short": "Password must be at least {min_length} characters",
        "reset_token_invalid": "Invalid or expired token",
        "password_reset_success": "Password changed successfully",
        "token_required": "Token is required",
        # operators
        "operator_not_found": "Operator not found",
        "operator_fields_required": "All fields are required",
        "username_taken": "Username is already in use",
        "email_taken": "Email is already in use",
        "admin_delete_forbidden": "Admin users cannot be deleted",
        "operator_deleted": "Operator deleted successfully",
        # customers
        "customer_not_found": "Customer not found",
        "phone_exists": "Phone number already exists",
        "customer_deleted": "Customer deleted successfully",
        "customer_create_failed": "Failed to create customer",
        # catalog
        "service_not_found": "Service not found",
        "service_deleted": "Service deleted successfully",
        "category_not_found": "Category not found",
        "category_exists": "Category name already exists",
        "category_in_use": "Cannot delete category that is being used by services",
        "category_deleted": "Category deleted successfully",
        # sessions
        "session_not_found": "Session not found",
        "session_completed": "Session is already completed",
        "session_ended": "Session ended successfully",
        "session_deleted": "Session deleted successfully",
        "session_status_invalid": "Session status can only be set to active or paused",
        "service_already_attached": "Service already exists in this session",
        "service_not_in_session": "Service not found in this session",
        "only_time_based_pause": "Only time-based services can be paused",
        "only_time_based_resume": "Only time-based services can be resumed",
        "service_already_paused": "Service is already paused",
        "service_not_paused": "Service is not paused",
        "service_finished": "Service has already ended",
        # settings
        "setting_not_found": "Setting not found",
        "setting_fields_required": "Key and value are required",
        "setting_key_required": "Key is required",
        "setting_deleted": "Setting deleted successfully",
        "retention_option_invalid": "Invalid retention option",
        "retention_updated": "Log retention settings updated successfully",
        # activity logs
        "logs_deleted": "{count} logs deleted successfully",
        # backups
        "backup_select_collection": "Please select at least one collection",
        "backup_invalid_collections": "Selected collections are not valid",
        "backup_started": "Backup process started",
        "backup_not_found": "Backup file not found",
        "backup_not_ready": "Backup has not completed",
        "backup_id_required": "Backup ID is required",
        # telegram
        "telegram_params_missing": "Missing required parameters",
        "telegram_sent_invoice": "Invoice sent to Telegram successfully",
        "telegram_sent_backup": "Backup file sent to Telegram successfully",
        "telegram_failed": "Failed to send to Telegram: {description}",
        # reports
        "report_invalid": "Invalid report type or period",
        # telegram captions
        "unknown_customer": "Unknown",
        "invoice_caption": "Session invoice\nCustomer: {customer}\nDate: {date}\nTime: {time}",
        "backup_caption": "System backup file\nDate: {date}\nTime: {time}",
        "invoice_image_invalid": "Invoice image is not valid base64 PNG data",
    },
    "fa": {
        "internal_error": "خطای داخلی سرور",
        "unauthorized": "احراز هویت مورد نیاز است",
        "forbidden": "دسترسی مجاز نیست - فقط ادمین",
        "validation_failed": "داده‌های درخواست نامعتبر است",
        "not_found": "مورد درخواستی یافت نشد",
        "conflict": "این مورد قبلاً ثبت شده است",
        "invalid_state": "این عملیات در وضعیت فعلی مجاز نیست",
        "no_update_data": "داده معتبری برای به‌روزرسانی ارسال نشده است",
        "invalid_id": "فرمت شناسه نامعتبر است",
        "credentials_required": "نام کاربری و رمز عبور الزامی است",
        "invalid_credentials": "نام کاربری یا رمز عبور اشتباه است",
        "login_success": "ورود موفقیت‌آمیز بود",
        "logout_success": "خروج موفقیت‌آمیز بود",
        "login_failed": "خطا در ورود به سیستم",
        "session_expired": "نشست یافت نشد یا منقضی شده است",
        "email_required": "ایمیل الزامی است",
        "email_invalid": "فرمت ایمیل صحیح نیست",
        "reset_link_sent": "اگر ایمیل در سیستم موجود باشد، لینک بازیابی ارسال خواهد شد",
        "reset_fields_required": "توکن و رمز عبور الزامی است",
        "password_too_short": "رمز عبور باید حداقل {min_length} کاراکتر باشد",
        "reset_token_invalid": "توکن نامعتبر یا منقضی شده است",
        "password_reset_success": "رمز عبور با موفقیت تغییر یافت",
        "token_required": "توکن الزامی است",
        "operator_not_found": "اپراتور یافت نشد",
        "operator_fields_required": "تمام فیلدها الزامی است",
        "username_taken": "نام کاربری قبلاً استفاده شده است",
        "email_taken": "ایمیل قبلاً استفاده شده است",
        "admin_delete_forbidden": "امکان حذف کاربر مدیر وجود ندارد",
        "operator_deleted": "اپراتور با موفقیت حذف شد",
        "customer_not_found": "مشتری یافت نشد",
        "phone_exists": "شماره تلفن قبلاً ثبت شده است",
        "customer_deleted": "مشتری با موفقیت حذف شد",
        "customer_create_failed": "خطا در ایجاد مشتری",
        "service_not_found": "سرویس یافت نشد",
        "service_deleted": "سرویس با موفقیت حذف شد",
        "category_not_found": "دسته‌بندی یافت نشد",
        "category_exists": "نام دسته‌بندی تکراری است",
        "category_in_use": "دسته‌بندی در حال استفاده توسط سرویس‌ها قابل حذف نیست",
        "category_deleted": "دسته‌بندی با موفقیت حذف شد",
        "session_not_found": "جلسه یافت نشد",
        "session_completed": "جلسه قبلاً به پایان رسیده است",
        "session_ended": "جلسه با موفقیت به پایان رسید",
        "session_deleted": "جلسه با موفقیت حذف شد",
        "session_status_invalid": "وضعیت جلسه فقط می‌تواند فعال یا متوقف باشد",
        "service_already_attached": "این سرویس قبلاً به جلسه اضافه شده است",
        "service_not_in_session": "سرویس در این جلسه یافت نشد",
        "only_time_based_pause": "فقط سرویس‌های زمانی قابل توقف هستند",
        "only_time_based_resume": "فقط سرویس‌های زمانی قابل ادامه هستند",
        "service_already_paused": "سرویس قبلاً متوقف شده است",
        "service_not_paused": "سرویس متوقف نیست",
        "service_finished": "سرویس قبلاً به پایان رسیده است",
        "setting_not_found": "تنظیم یافت نشد",
        "setting_fields_required": "کلید و مقدار الزامی است",
        "setting_key_required": "کلید الزامی است",
        "setting_deleted": "تنظیم با موفقیت حذف شد",
        "retention_option_invalid": "گزینه نگهداری نامعتبر است",
        "retention_updated": "تنظیمات نگهداری لاگ‌ها با موفقیت به‌روزرسانی شد",
        "logs_deleted": "{count} لاگ با موفقیت حذف شد",
        "backup_select_collection": "لطفاً حداقل یک کالکشن انتخاب کنید",
        "backup_invalid_collections": "کالکشن‌های انتخابی معتبر نیستند",
        "backup_started": "فرآیند بک‌آپ شروع شد",
        "backup_not_found": "فایل بک‌آپ یافت نشد",
        "backup_not_ready": "بک‌آپ هنوز کامل نشده است",
        "backup_id_required": "شناسه بک‌آپ الزامی است",
        "telegram_params_missing": "پارامترهای مورد نیاز ارسال نشده است",
        "telegram_sent_invoice": "فاکتور با موفقیت به تلگرام ارسال شد",
        "telegram_sent_backup": "فایل بک‌آپ با موفقیت به تلگرام ارسال شد",
        "telegram_failed": "خطا در ارسال به تلگرام: {description}",
        "report_invalid": "نوع گزارش یا بازه زمانی نامعتبر است",
        "unknown_customer": "نامشخص",
        "invoice_caption": "🧾 فاکتور جلسه\n👤 مشتری: {customer}\n📅 تاریخ: {date}\n⏰ ساعت: {time}",
        "backup_caption": "🗂 فایل بک‌آپ سیستم\n📅 تاریخ: {date}\n⏰ ساعت: {time}",
        "invoice_image_invalid": "تصویر فاکتور معتبر نیست",
    },
}


def translate(key: str, language: str = None, **params) -> str:
    """Look up a message in the configured language, falling back to English"""
    language = language or get_settings().language
    catalog = MESSAGES.get(language, MESSAGES["en"])
    template = catalog.get(key) or MESSAGES["en"].get(key, key)
    return template.format(**params) if params else template
