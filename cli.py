import typer
from sqlalchemy.exc import SQLAlchemyError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typing import Optional
from datetime import datetime, date
import logging
import time

from backend.database import init_db
from backend.store import get_store
from backend.schemas import ActivityCategory, GradeLevel, ScheduleItem, ItemStatus, UserCreate, UserRole, DAYS, weekday_name
from backend.exceptions import StudySyncError, StoreUnavailableError
from backend.conflicts import duration_minutes, format_duration, find_conflicts
from backend.blueprint import add_template_item, remove_template_item, clone_day
from backend.log_manager import DailyLogManager
from backend.reconciler import sync_history, average_score
from backend.family import create_account, create_child, list_children, child_progress
from backend.templates import seed_demo
from backend.reminders import ReminderPoller
from backend.advice import get_advice
from backend.xp import level_progress, XP_REASONS

app = typer.Typer(help="Study Sync CLI - weekly blueprints, daily logs and XP for students and parents")
console = Console()

DATE_FORMATS = ["%Y-%m-%d"]


def _parse_date(value: Optional[datetime]) -> date:
    return value.date() if value else date.today()


def _load_user(store, user_id: str):
    user = store.get_user_profile(user_id)
    if not user:
        console.print(f"[red]✗[/red] User ID {user_id} not found")
    return user


def _report(e: Exception):
    if isinstance(e, StoreUnavailableError):
        console.print(f"[red]✗[/red] Data unavailable: {escape(e.message)}")
    else:
        console.print(f"[red]✗[/red] {escape(str(e))}")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@app.command()
def init():
    """Initialize database tables"""
    try:
        init_db()
    except SQLAlchemyError as e:
        _report(StoreUnavailableError(str(e), operation="init_db", cause=e))
        return
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    from backend.database import engine, Base
    import backend.models  # noqa: F401
    try:
        console.print("[yellow]Dropping all tables...[/yellow]")
        Base.metadata.drop_all(bind=engine)
        console.print("[yellow]Recreating tables...[/yellow]")
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        _report(StoreUnavailableError(str(e), operation="reset_db", cause=e))
        return
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command()
def create_profile(
    handle: str = typer.Option(..., prompt="Login handle"),
    name: str = typer.Option(..., prompt="Display name"),
    role: UserRole = typer.Option(UserRole.STUDENT, prompt="Role (STUDENT/PARENT)"),
    grade: Optional[GradeLevel] = typer.Option(None, help="Grade level, students start from its template"),
    specific_grade: Optional[int] = typer.Option(None, help="Grade number (e.g. 7)"),
    phone: str = typer.Option("", help="Phone number")
):
    """Create a new student or parent account"""
    try:
        store = get_store()
        user = create_account(store, UserCreate(
            user_id=handle,
            name=name,
            phone=phone,
            role=role,
            grade=grade,
            specific_grade=specific_grade
        ))
        console.print(f"[green]✓[/green] Profile created successfully! User ID: {user.id}")
        console.print(f"  Name: {user.name} ({user.role.value})")
        console.print(f"  XP: {user.xp} (level {level_progress(user.xp)['level']})")
    except (StudySyncError, ValueError) as e:
        _report(e)


@app.command()
def add_child(
    parent_id: str = typer.Option(..., prompt="Parent user ID"),
    handle: str = typer.Option(..., prompt="Child login handle"),
    name: str = typer.Option(..., prompt="Child's name"),
    grade: Optional[GradeLevel] = typer.Option(None, help="Grade level"),
    specific_grade: Optional[int] = typer.Option(None, help="Grade number"),
    phone: str = typer.Option("", help="Phone number")
):
    """Enrol a student account under a parent"""
    try:
        store = get_store()
        child = create_child(store, parent_id, name, handle, phone=phone, grade=grade, specific_grade=specific_grade)
        console.print(f"[green]✓[/green] {child.name} enrolled! User ID: {child.id}")
    except (StudySyncError, ValueError) as e:
        _report(e)


@app.command("list-children")
def list_children_cmd(parent_id: str):
    """List a parent's children with today's progress"""
    try:
        store = get_store()
        children = list_children(store, parent_id)
        if not children:
            console.print(f"[yellow]No children linked to {parent_id}[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("ID", style="dim")
        table.add_column("Level", justify="right")
        table.add_column("XP", justify="right", style="green")
        table.add_column("Today", justify="right", style="yellow")
        table.add_column("7-day avg", justify="right")

        for child in children:
            progress = child_progress(store, child)
            avg = f"{progress.week_average}%" if progress.week_average is not None else "-"
            table.add_row(child.name, child.id, str(progress.level), str(child.xp),
                          f"{progress.today_score}%", avg)

        console.print(table)
    except StudySyncError as e:
        _report(e)


@app.command()
def view_profile(user_id: str):
    """View account profile"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return

        progress = level_progress(user.xp)
        console.print("\n[bold]Profile[/bold]")
        console.print(f"  ID: {user.id}")
        console.print(f"  Login: {user.user_id}")
        console.print(f"  Name: {user.name}")
        console.print(f"  Role: {user.role.value}")
        if user.grade:
            console.print(f"  Grade: {user.grade.value} {user.specific_grade or ''}")
        if user.parent_id:
            console.print(f"  Parent: {user.parent_id}")
        console.print(f"  XP: {user.xp} (level {progress['level']}, {progress['xp_in_level']}/{progress['xp_per_level']})")
    except StudySyncError as e:
        _report(e)


@app.command()
def add_item(
    user_id: str = typer.Option(..., prompt="User ID"),
    day: str = typer.Option(..., prompt="Day (e.g., Monday)"),
    start: str = typer.Option(..., prompt="Start time (HH:MM)"),
    end: str = typer.Option(..., prompt="End time (HH:MM)"),
    label: str = typer.Option(..., prompt="Label"),
    category: ActivityCategory = typer.Option(ActivityCategory.STUDYING, help="Activity category"),
    subject: Optional[str] = typer.Option(None, help="Planned subject"),
    reminder: Optional[int] = typer.Option(None, help="Reminder minutes before start")
):
    """Add an activity to the weekly blueprint"""
    try:
        store = get_store()
        item = ScheduleItem(
            category=category,
            start_time=start,
            end_time=end,
            label=label,
            planned_subject=subject,
            reminder_minutes=reminder
        )
        user, conflicts = add_template_item(store, user_id, day.capitalize(), item)
        console.print(f"[green]✓[/green] Added '{label}' to {day.capitalize()} ({format_duration(duration_minutes(item))})")
        if conflicts:
            console.print(f"[yellow]⚠ {len(conflicts)} item(s) on {day.capitalize()} overlap. Run view-schedule to review.[/yellow]")
    except (StudySyncError, ValueError) as e:
        _report(e)


@app.command()
def remove_item(user_id: str, day: str, item_id: str):
    """Remove an activity from the weekly blueprint"""
    try:
        store = get_store()
        remove_template_item(store, user_id, day.capitalize(), item_id)
        console.print(f"[green]✓[/green] Removed item from {day.capitalize()}")
    except StudySyncError as e:
        _report(e)


@app.command()
def copy_day(user_id: str, day: str):
    """Copy a day's blueprint onto the next day"""
    try:
        store = get_store()
        _, next_day = clone_day(store, user_id, day.capitalize())
        console.print(f"[green]✓[/green] Copied {day.capitalize()} to {next_day}")
    except StudySyncError as e:
        _report(e)


@app.command()
def view_schedule(user_id: str, day: Optional[str] = typer.Option(None, help="Only show this day")):
    """View the weekly blueprint with overlaps flagged"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return

        days = [day.capitalize()] if day else DAYS
        for day_name in days:
            items = sorted(user.day_items(day_name), key=lambda i: i.start_time or "00:00")
            if not items:
                continue
            conflicts = find_conflicts(items)

            table = Table(title=day_name, show_header=True, header_style="bold magenta")
            table.add_column("Time", style="cyan", width=13)
            table.add_column("Activity", style="green")
            table.add_column("Category", style="yellow")
            table.add_column("Duration", style="blue", justify="right")
            table.add_column("ID", style="dim")

            for item in items:
                flag = " [red]⚠[/red]" if item.id in conflicts else ""
                table.add_row(
                    f"{item.start_time}-{item.end_time}",
                    f"{item.label}{flag}",
                    item.category.value,
                    format_duration(duration_minutes(item)),
                    item.id
                )
            console.print(table)
    except StudySyncError as e:
        _report(e)


@app.command()
def today(
    user_id: str,
    log_date: Optional[datetime] = typer.Option(None, "--date", formats=DATE_FORMATS, help="Date (YYYY-MM-DD), default: today")
):
    """Show a day's timeline, sync score and XP"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return

        day = _parse_date(log_date)
        view = DailyLogManager(store).day_view(user, day)

        console.print(f"\n[bold]{weekday_name(day)} {day.isoformat()} - {user.name}[/bold]")
        score_style = "green" if view.sync_score > 80 else "yellow"
        console.print(f"Sync: [{score_style}]{view.sync_score}%[/{score_style}]   XP: {user.xp} (level {level_progress(user.xp)['level']})\n")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Time", style="cyan", width=13)
        table.add_column("Activity", style="green")
        table.add_column("Status")
        table.add_column("ID", style="dim")

        for item in view.timeline:
            if item.status == ItemStatus.LOGGED:
                status = "[cyan]Spontaneous[/cyan]" if not item.planned_id else "[green]✓ Logged[/green]"
            else:
                status = "[yellow]Pending[/yellow]"
            flag = " [red]⚠[/red]" if item.id in view.conflicts else ""
            table.add_row(f"{item.start_time or '--:--'}-{item.end_time or '--:--'}", f"{item.label}{flag}", status, item.id)

        console.print(table)

        if view.unsnapshotted:
            console.print("\n[dim]Added to the blueprint after today's plan was captured (not scored):[/dim]")
            for item in view.unsnapshotted:
                console.print(f"[dim]  {item.start_time}-{item.end_time} {item.label}[/dim]")
    except StudySyncError as e:
        _report(e)


app.command(name="view-day")(today)


@app.command()
def complete(
    user_id: str,
    item_id: str,
    log_date: Optional[datetime] = typer.Option(None, "--date", formats=DATE_FORMATS, help="Date (YYYY-MM-DD), default: today"),
    notes: Optional[str] = typer.Option(None, help="Reflection notes"),
    subject: Optional[str] = typer.Option(None, help="What was actually studied")
):
    """Mark a planned activity as done (+50 XP)"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return
        manager = DailyLogManager(store)
        log = manager.get_or_create_log(user.id, _parse_date(log_date), user.weekly_schedule)
        _, award = manager.fulfill(user.id, log, item_id, notes=notes, actual_subject=subject)
        console.print(f"[green]✓[/green] +{award.amount} XP - {XP_REASONS[award.event]} (total {award.total})")
    except StudySyncError as e:
        _report(e)


@app.command()
def log_activity(
    user_id: str = typer.Option(..., prompt="User ID"),
    start: str = typer.Option(..., prompt="Start time (HH:MM)"),
    end: str = typer.Option(..., prompt="End time (HH:MM)"),
    label: str = typer.Option("Spontaneous Mission", prompt="What did you do?"),
    category: ActivityCategory = typer.Option(ActivityCategory.OTHER, help="Activity category"),
    notes: Optional[str] = typer.Option(None, help="Reflection notes"),
    log_date: Optional[datetime] = typer.Option(None, "--date", formats=DATE_FORMATS, help="Date (YYYY-MM-DD), default: today")
):
    """Log an unplanned activity (+25 XP)"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return
        manager = DailyLogManager(store)
        log = manager.get_or_create_log(user.id, _parse_date(log_date), user.weekly_schedule)
        item = ScheduleItem(category=category, start_time=start, end_time=end, label=label, notes=notes)
        _, award = manager.log_spontaneous(user.id, log, item)
        console.print(f"[green]✓[/green] +{award.amount} XP - {XP_REASONS[award.event]} (total {award.total})")
    except StudySyncError as e:
        _report(e)


@app.command()
def remove_entry(
    user_id: str,
    item_id: str,
    log_date: Optional[datetime] = typer.Option(None, "--date", formats=DATE_FORMATS, help="Date (YYYY-MM-DD), default: today")
):
    """Remove a logged entry, or drop a pending item from the day"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return
        manager = DailyLogManager(store)
        log = manager.get_or_create_log(user.id, _parse_date(log_date), user.weekly_schedule)
        manager.remove_entry(log, item_id)
        console.print("[green]✓[/green] Entry removed")
    except StudySyncError as e:
        _report(e)


@app.command()
def edit_entry(
    user_id: str,
    item_id: str,
    log_date: Optional[datetime] = typer.Option(None, "--date", formats=DATE_FORMATS, help="Date (YYYY-MM-DD), default: today"),
    start: Optional[str] = typer.Option(None, help="New start time (HH:MM)"),
    end: Optional[str] = typer.Option(None, help="New end time (HH:MM)"),
    subject: Optional[str] = typer.Option(None, help="What was actually studied"),
    notes: Optional[str] = typer.Option(None, help="Reflection notes")
):
    """Edit the notes, subject or times of a day's entry (no XP change)"""
    changes = {
        "start_time": start,
        "end_time": end,
        "actual_subject": subject,
        "notes": notes,
    }
    changes = {key: value for key, value in changes.items() if value is not None}
    if not changes:
        console.print("[yellow]Nothing to change. Pass --start, --end, --subject or --notes.[/yellow]")
        return

    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return
        manager = DailyLogManager(store)
        log = manager.get_or_create_log(user.id, _parse_date(log_date), user.weekly_schedule)
        entry = manager.find_entry(log, item_id)
        manager.update_entry(log, entry.model_copy(update=changes))
        console.print(f"[green]✓[/green] Updated '{entry.label}'")
    except StudySyncError as e:
        _report(e)


@app.command()
def history(user_id: str, days: int = typer.Option(30, help="Number of days to show")):
    """Show the sync score for each of the last N days"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return
        pulse = sync_history(store.get_daily_logs(user.id), date.today(), days=days)

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Date", style="cyan")
        table.add_column("Day")
        table.add_column("Sync", justify="right")

        for day, score in pulse:
            if score is None:
                table.add_row(day.isoformat(), weekday_name(day), "[dim]-[/dim]")
            else:
                style = "green" if score >= 90 else "blue" if score >= 50 else "yellow"
                table.add_row(day.isoformat(), weekday_name(day), f"[{style}]{score}%[/{style}]")

        console.print(table)
        avg = average_score(pulse)
        if avg is not None:
            console.print(f"\n[bold]Average:[/bold] {avg}%")
    except StudySyncError as e:
        _report(e)


@app.command()
def advice(user_id: str):
    """Get AI coaching tips for the weekly blueprint"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return
        console.print("[yellow]Asking Mission Control (this may take a moment)...[/yellow]")
        console.print(f"\n{get_advice(user.weekly_schedule)}\n")
    except StudySyncError as e:
        _report(e)


@app.command("seed-demo")
def seed_demo_cmd(
    level: GradeLevel = typer.Option(GradeLevel.MIDDLE, help="Grade level of the demo student"),
    grade_num: int = typer.Option(7, help="Grade number"),
    days: int = typer.Option(14, help="Days of history to create")
):
    """Create a demo parent/child pair with history"""
    try:
        store = get_store()
        parent, child = seed_demo(store, level, grade_num, days=days)
        console.print("[green]✓[/green] Simulation ready!")
        console.print(f"  Parent: {parent.user_id} ({parent.id})")
        console.print(f"  Student: {child.user_id} ({child.id})")
    except StudySyncError as e:
        _report(e)


@app.command()
def watch_reminders(user_id: str):
    """Print reminders for today's blueprint as they come due (Ctrl+C to stop)"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
    except StudySyncError as e:
        _report(e)
        return
    if not user:
        return

    def current_schedule():
        fresh = store.get_user_profile(user_id)
        return fresh.weekly_schedule if fresh else {}

    def notify(alert):
        console.print(f"[bold magenta]🚀 Mission Alert![/bold magenta] {alert.message}")

    poller = ReminderPoller(current_schedule, notify)
    poller.start()
    console.print(f"[green]✓[/green] Watching reminders for {user.name} (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped.[/yellow]")
    finally:
        poller.stop()


@app.command()
def delete_account(user_id: str):
    """Delete an account and all of its logs (WARNING: irreversible!)"""
    try:
        store = get_store()
        user = _load_user(store, user_id)
        if not user:
            return
        if not typer.confirm(f"⚠️  Delete {user.name} and all of their logs?"):
            console.print("[yellow]Cancelled.[/yellow]")
            return
        store.delete_user(user_id)
        console.print("[green]✓[/green] Account deleted.")
    except StudySyncError as e:
        _report(e)


if __name__ == "__main__":
    app()
