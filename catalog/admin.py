from django.contrib import admin

# Register your models here.
from .models import Test, Question, Option


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ('text', 'test', 'question_type', 'marks')
    list_filter = ('question_type',)
    inlines = [OptionInline]


@admin.register(Test)
class TestAdmin(admin.ModelAdmin):
    list_display = ('title', 'test_type', 'total_marks', 'passing_score', 'is_active', 'is_published')
    list_filter = ('test_type', 'is_active', 'is_published')
    search_fields = ('title',)


admin.site.register(Option)
