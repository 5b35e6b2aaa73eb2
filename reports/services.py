"""
Read-only sales reports. Money values are rendered as two-decimal strings.
"""
import calendar
from collections import OrderedDict
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from orders.models import Order, OrderItem, OrderStatus
from payment.models import Payment
from pos.exceptions import ValidationError
from staff.models import Employee

REVENUE_INTERVALS = ['daily', 'weekly', 'monthly']


def money(value):
    return f"{Decimal(value or 0):.2f}"


def average(total, count):
    return money(Decimal(total) / count) if count else money(0)


def current_month():
    today = timezone.localdate()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def _summary(orders):
    totals = orders.aggregate(
        total_orders=Count('id'),
        completed_orders=Count('id', filter=Q(status=OrderStatus.COMPLETED)),
        cancelled_orders=Count('id', filter=Q(status=OrderStatus.CANCELLED)),
        total_revenue=Sum('final_amount', filter=Q(status=OrderStatus.COMPLETED)),
        total_discount=Sum('discount'),
        total_tax=Sum('tax'),
    )
    revenue = totals['total_revenue'] or Decimal('0')
    return {
        'total_orders': totals['total_orders'],
        'completed_orders': totals['completed_orders'],
        'cancelled_orders': totals['cancelled_orders'],
        'total_revenue': money(revenue),
        'total_discount': money(totals['total_discount']),
        'total_tax': money(totals['total_tax']),
        'average_order_value': average(revenue, totals['completed_orders']),
    }, revenue


def daily_sales(day=None):
    day = day or timezone.localdate()
    orders = Order.objects.filter(order_date__date=day)
    summary, _ = _summary(orders)

    payments_by_method = {
        row['payment_method']: money(row['total'])
        for row in Payment.objects.filter(order__in=orders)
        .values('payment_method').annotate(total=Sum('order__final_amount')).order_by('payment_method')
    }

    top_items = [
        {'name': row['product__name'], 'quantity': row['quantity'], 'revenue': money(row['revenue'])}
        for row in OrderItem.objects.filter(order__in=orders)
        .values('product__name').annotate(quantity=Sum('quantity'), revenue=Sum('subtotal'))
        .order_by('-quantity', 'product__name')[:10]
    ]

    return {
        'date': day.isoformat(),
        'summary': summary,
        'payments_by_method': payments_by_method,
        'top_selling_items': top_items,
    }


def monthly_sales(year=None, month=None):
    today = timezone.localdate()
    if year is None:
        year = today.year
    if month is None:
        month = today.month
    if not date.min.year <= year <= date.max.year:
        raise ValidationError(f"year must be between {date.min.year} and {date.max.year}")
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")

    days_in_month = calendar.monthrange(year, month)[1]
    orders = Order.objects.filter(order_date__date__range=(date(year, month, 1), date(year, month, days_in_month)))
    summary, revenue = _summary(orders)
    del summary['total_tax']
    summary['average_daily_revenue'] = money(revenue / days_in_month)

    daily_breakdown = OrderedDict()
    completed = orders.filter(status=OrderStatus.COMPLETED).order_by('order_date')
    for order_date, final_amount in completed.values_list('order_date', 'final_amount'):
        day = str(timezone.localtime(order_date).day)
        entry = daily_breakdown.setdefault(day, {'orders': 0, 'revenue': Decimal('0')})
        entry['orders'] += 1
        entry['revenue'] += final_amount
    for entry in daily_breakdown.values():
        entry['revenue'] = money(entry['revenue'])

    sales_by_category = {
        row['product__category__name']: {'quantity': row['quantity'], 'revenue': money(row['revenue'])}
        for row in OrderItem.objects.filter(order__in=orders)
        .values('product__category__name').annotate(quantity=Sum('quantity'), revenue=Sum('subtotal'))
        .order_by('product__category__name')
    }

    return {
        'year': year,
        'month': month,
        'summary': summary,
        'daily_breakdown': daily_breakdown,
        'sales_by_category': sales_by_category,
    }


def employee_performance(start_date=None, end_date=None, employee_id=None):
    if not (start_date and end_date):
        start_date, end_date = current_month()

    employees = Employee.objects.filter(is_active=True)
    if employee_id:
        employees = employees.filter(pk=employee_id)

    performance = []
    for employee in employees:
        orders = employee.orders.filter(order_date__date__range=(start_date, end_date))
        completed = orders.filter(status=OrderStatus.COMPLETED)
        revenue = completed.aggregate(total=Sum('final_amount'))['total'] or Decimal('0')
        completed_count = completed.count()
        payments = employee.payments_processed.filter(payment_date__date__range=(start_date, end_date))
        payment_totals = payments.aggregate(count=Count('id'), total=Sum('amount_paid'))
        performance.append({
            'employee_id': employee.id,
            'employee_name': employee.name,
            'role': employee.role,
            'orders_handled': orders.count(),
            'completed_orders': completed_count,
            'revenue_generated': money(revenue),
            'items_sold': OrderItem.objects.filter(order__in=orders).aggregate(total=Sum('quantity'))['total'] or 0,
            'payments_processed': payment_totals['count'],
            'payments_total': money(payment_totals['total']),
            'average_order_value': average(revenue, completed_count),
        })

    performance.sort(key=lambda row: Decimal(row['revenue_generated']), reverse=True)
    return {
        'period': {'start': start_date.isoformat(), 'end': end_date.isoformat()},
        'employees': performance,
    }


def _completed_items(start_date, end_date):
    if not (start_date and end_date):
        start_date, end_date = current_month()
    items = OrderItem.objects.filter(
        order__status=OrderStatus.COMPLETED,
        order__order_date__date__range=(start_date, end_date),
    )
    return items, {'start': start_date.isoformat(), 'end': end_date.isoformat()}


def most_sold_items(start_date=None, end_date=None, limit=20):
    items, period = _completed_items(start_date, end_date)
    rows = (
        items.values('product_id', 'product__name', 'product__price',
                     'product__category__name', 'product__category__type')
        .annotate(total_quantity=Sum('quantity'), total_revenue=Sum('subtotal'), times_ordered=Count('id'))
        .order_by('-total_quantity', 'product__name')[:limit]
    )
    return {
        'period': period,
        'items': [
            {
                'product_id': row['product_id'],
                'product_name': row['product__name'],
                'category': row['product__category__name'],
                'category_type': row['product__category__type'],
                'unit_price': money(row['product__price']),
                'total_quantity_sold': row['total_quantity'],
                'total_revenue': money(row['total_revenue']),
                'times_ordered': row['times_ordered'],
                'average_quantity_per_order': average(row['total_quantity'], row['times_ordered']),
            }
            for row in rows
        ],
    }


def sales_by_category(start_date=None, end_date=None):
    items, period = _completed_items(start_date, end_date)
    rows = list(
        items.values(category_id=F('product__category_id'), category_name=F('product__category__name'),
                     category_type=F('product__category__type'))
        .annotate(total_items_sold=Sum('quantity'), total_revenue=Sum('subtotal'), number_of_orders=Count('id'))
        .order_by('-total_revenue')
    )
    total_revenue = sum((row['total_revenue'] for row in rows), Decimal('0'))
    for row in rows:
        share = row['total_revenue'] / total_revenue * 100 if total_revenue else Decimal('0')
        row['revenue_percentage'] = money(share)
        row['total_revenue'] = money(row['total_revenue'])
    return {
        'period': period,
        'total_revenue': money(total_revenue),
        'categories': rows,
    }


def _period_key(day, interval):
    if interval == 'weekly':
        # Weeks start on Sunday
        return (day - timedelta(days=(day.weekday() + 1) % 7)).isoformat()
    if interval == 'monthly':
        return f"{day.year}-{day.month:02d}"
    return day.isoformat()


def revenue_over_time(start_date, end_date, interval='daily'):
    if not (start_date and end_date):
        raise ValidationError("Start date and end date are required")
    if interval not in REVENUE_INTERVALS:
        raise ValidationError(f"Interval must be one of: {', '.join(REVENUE_INTERVALS)}")

    orders = Order.objects.filter(
        status=OrderStatus.COMPLETED,
        order_date__date__range=(start_date, end_date),
    ).order_by('order_date')

    periods = {}
    for order_date, final_amount in orders.values_list('order_date', 'final_amount'):
        key = _period_key(timezone.localtime(order_date).date(), interval)
        entry = periods.setdefault(key, {'orders': 0, 'revenue': Decimal('0')})
        entry['orders'] += 1
        entry['revenue'] += final_amount

    return {
        'interval': interval,
        'start_date': start_date.isoformat(),
        'end_date': end_date.isoformat(),
        'periods': [
            {'period': key, 'orders': periods[key]['orders'], 'revenue': money(periods[key]['revenue'])}
            for key in sorted(periods)
        ],
    }
