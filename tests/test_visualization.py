from budgetbox.models import BudgetFields, BudgetSnapshot
from budgetbox.visualization import (
    category_breakdown,
    create_category_pie,
    create_snapshot_trend,
    snapshot_frame,
)


def test_category_breakdown_skips_zero_categories():
    df = category_breakdown(BudgetFields(income=1000, food=200, transport=0, miscellaneous=50))
    assert list(df['Category']) == ['Food', 'Miscellaneous']
    assert list(df['Amount']) == [200, 50]


def test_empty_budget_gives_placeholder_figure():
    fig = create_category_pie(BudgetFields(income=1000))
    assert fig.layout.title.text == 'No data to display'


def test_category_pie_has_one_slice_per_category():
    fig = create_category_pie(BudgetFields(monthly_bills=100, food=50))
    assert len(fig.data) == 1
    assert list(fig.data[0].labels) == ['Monthly Bills', 'Food']


def test_snapshot_frame_is_oldest_first():
    history = [
        BudgetSnapshot(id='b', timestamp='2025-02-01T00:00:00.000Z', budget=BudgetFields(income=20, food=5)),
        BudgetSnapshot(id='a', timestamp='2025-01-01T00:00:00.000Z', budget=BudgetFields(income=10, food=1), label='jan'),
    ]
    df = snapshot_frame(history)
    assert list(df['Income']) == [10, 20]
    assert list(df['Spend']) == [1, 5]
    assert df.loc[0, 'Label'] == 'jan'


def test_snapshot_trend_empty_history():
    assert create_snapshot_trend([]).layout.title.text == 'No data to display'
